"""Compile generated C sources into a static archive with the host toolchain."""
from __future__ import annotations

import hashlib
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from ..domain.models import StaticLibrary
from ..utils.constants import (
    AR_ENV,
    C_STANDARD_FLAG,
    CC_ENV,
    CFLAGS_ENV,
    DEFAULT_AR,
    DEFAULT_CC,
    OBJECT_DIR_NAME,
)
from ..utils.errors import CompilerExecutionError
from ..utils.logging import get_logger

LOG = get_logger()


def resolve_tool(env_name: str, default: str, environ: Mapping[str, str]) -> List[str]:
    """Return the tool command from ``environ`` (may carry flags) or the default on PATH."""

    override = environ.get(env_name, "").strip()
    if override:
        return shlex.split(override)
    return [shutil.which(default) or default]


def object_path_for(source: Path, source_root: Path, object_dir: Path) -> Path:
    """Map a C source to its object file, mirroring its layout under ``source_root``."""

    try:
        relative = source.relative_to(source_root)
    except ValueError:
        # sources outside the root keep their name, disambiguated by the parent path
        digest = hashlib.sha1(str(source.parent).encode("utf-8")).hexdigest()[:8]
        relative = Path(f"{digest}_{source.name}")
    return object_dir / relative.with_suffix(relative.suffix + ".o")


def compile_command(
    cc: Sequence[str],
    source: Path,
    obj: Path,
    include_dirs: Sequence[Path],
    extra_flags: Sequence[str] = (),
) -> List[str]:
    cmd = list(cc) + ["-c", "-fPIC", C_STANDARD_FLAG]
    cmd.extend(f"-I{include}" for include in include_dirs)
    cmd.extend(extra_flags)
    cmd += ["-o", str(obj), str(source)]
    return cmd


def archive_command(ar: Sequence[str], archive: Path, objects: Sequence[Path]) -> List[str]:
    return list(ar) + ["crs", str(archive)] + [str(obj) for obj in objects]


def _run(label: str, cmd: Sequence[str]) -> None:
    LOG.info("%s: %s", label, " ".join(cmd))
    try:
        proc = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            check=True,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.CalledProcessError as exc:
        if exc.stdout:
            LOG.error("[%s STDOUT]\n%s", label, exc.stdout)
        if exc.stderr:
            LOG.error("[%s STDERR]\n%s", label, exc.stderr)
        raise CompilerExecutionError(f"{label} failed with rc={exc.returncode}") from exc
    except OSError as exc:
        raise CompilerExecutionError(f"failed to run {label}: {exc}") from exc
    if proc.stderr:
        LOG.info("[%s STDERR]\n%s", label, proc.stderr)


def compile_static_library(
    sources: Sequence[Path],
    *,
    name: str,
    output_dir: Path,
    include_dirs: Sequence[Path],
    environ: Mapping[str, str],
    library_dir: Optional[Path] = None,
) -> StaticLibrary:
    """Compile ``sources`` and archive them as ``lib<name>.a``.

    Parameters
    ----------
    sources:
        C files to compile, in link order.
    name:
        Library name without the ``lib`` prefix or ``.a`` suffix.
    output_dir:
        Root of the generated tree; objects are placed under
        ``<output_dir>/.objects`` mirroring the sources' layout.
    include_dirs:
        Header search paths passed as ``-I`` flags, in order.
    environ:
        Mapping consulted for ``CC``, ``AR`` and ``CFLAGS``.
    library_dir:
        Directory receiving the archive (default: ``output_dir``).
    """

    cc = resolve_tool(CC_ENV, DEFAULT_CC, environ)
    ar = resolve_tool(AR_ENV, DEFAULT_AR, environ)
    extra_flags = shlex.split(environ.get(CFLAGS_ENV, ""))
    object_dir = output_dir / OBJECT_DIR_NAME
    search_dir = library_dir if library_dir is not None else output_dir

    objects: List[Path] = []
    for source in sources:
        obj = object_path_for(source, output_dir, object_dir)
        obj.parent.mkdir(parents=True, exist_ok=True)
        _run("cc", compile_command(cc, source, obj, include_dirs, extra_flags))
        objects.append(obj)

    search_dir.mkdir(parents=True, exist_ok=True)
    archive = search_dir / f"lib{name}.a"
    if archive.exists():
        # ar appends to existing archives; start from a clean one
        archive.unlink()
    _run("ar", archive_command(ar, archive, objects))
    LOG.info("archived %d object(s) into %s", len(objects), archive)

    return StaticLibrary(
        name=name,
        path=archive,
        search_dir=search_dir,
        include_dirs=tuple(include_dirs),
        sources=tuple(sources),
        objects=tuple(objects),
    )


__all__ = [
    "archive_command",
    "compile_command",
    "compile_static_library",
    "object_path_for",
    "resolve_tool",
]
