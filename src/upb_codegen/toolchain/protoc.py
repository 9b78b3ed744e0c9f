"""Integration with the protoc compiler and the upb minitable plugin."""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Sequence

from ..utils.constants import MINITABLE_PLUGIN_NAME, RUST_CODEGEN_OPTIONS
from ..utils.errors import ProtocExecutionError, ProtocLaunchError
from ..utils.logging import get_logger

LOG = get_logger()


def build_protoc_command(
    protoc: Path,
    inputs: Sequence[Path],
    *,
    output_dir: Path,
    plugin: Path,
    includes: Sequence[Path] = (),
) -> List[str]:
    """Assemble the protoc argument vector for Rust + minitable generation."""

    cmd = [str(protoc)]
    cmd.extend(str(path) for path in inputs)
    cmd += [
        f"--rust_out={output_dir}",
        f"--rust_opt={RUST_CODEGEN_OPTIONS}",
        f"--plugin={MINITABLE_PLUGIN_NAME}={plugin}",
        f"--upb_minitable_out={output_dir}",
    ]
    cmd.extend(f"--proto_path={include}" for include in includes)
    return cmd


def run_protoc(cmd: Sequence[str]) -> None:
    """Run protoc to completion.

    A process that cannot be started is reported with
    :class:`ProtocLaunchError`; a non-zero exit status is fatal and raises
    :class:`ProtocExecutionError`.
    """

    LOG.info("protoc: %s", " ".join(cmd))
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
            LOG.error("[protoc STDOUT]\n%s", exc.stdout)
        if exc.stderr:
            LOG.error("[protoc STDERR]\n%s", exc.stderr)
        raise ProtocExecutionError(f"protoc failed with rc={exc.returncode}") from exc
    except OSError as exc:
        raise ProtocLaunchError(f"failed to run protoc: {exc}") from exc

    LOG.info("[protoc] rc=%d", proc.returncode)
    if proc.stdout:
        LOG.info("[protoc STDOUT]\n%s", proc.stdout)
    if proc.stderr:
        LOG.info("[protoc STDERR]\n%s", proc.stderr)


__all__ = ["build_protoc_command", "run_protoc"]
