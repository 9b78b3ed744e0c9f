"""Configuration builder driving protoc generation and the C compile step."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from . import __version__
from .domain.models import CodeGenConfig, GeneratedFiles, StaticLibrary
from .toolchain import binaries
from .toolchain.cc import compile_static_library
from .toolchain.protoc import build_protoc_command, run_protoc
from .utils.constants import (
    GENERATED_DIR_NAME,
    LIBRARY_SUFFIX,
    MINITABLE_SUFFIX,
    OUT_DIR_ENV,
    PACKAGE_NAME_ENV,
    RUST_SUFFIX,
    UPB_INCLUDE_ENV,
    UPB_VERSION_ENV,
)
from .utils.errors import (
    MissingEnvironmentError,
    MissingGeneratedFileError,
    UnsupportedPlatformError,
    VersionMismatchError,
)
from .utils.io import ensure_output_directory
from .utils.logging import get_logger

LOG = get_logger()

PathLike = Union[str, "os.PathLike[str]"]

_ENV_HINTS = {
    UPB_VERSION_ENV: "make sure that the upb runtime package is a dependency",
    UPB_INCLUDE_ENV: "make sure that the upb runtime package is a dependency",
    PACKAGE_NAME_ENV: "set it to the consuming package name or call package_name(...)",
}


def derive_generated_path(output_dir: Path, source: Path, suffix: str) -> Path:
    """Replace the extension of ``source`` with ``suffix`` and place it under ``output_dir``."""

    name = source.name
    if not name or name == "..":
        raise ValueError(f"input path has no file name: {str(source)!r}")
    # the text after the last dot is the extension, even when empty ("foo.");
    # a leading dot alone (".hidden") is part of the stem
    dot = name.rfind(".")
    stem = name[:dot] if dot > 0 else name
    return output_dir / source.with_name(stem + suffix)


def _non_empty_path(value: PathLike) -> Path:
    if not os.fspath(value):
        raise ValueError("output directory must not be empty")
    return Path(value)


class CodeGen:
    """Accumulates inputs and tool overrides, then generates and compiles.

    Setters return ``self`` so a build script can chain them::

        CodeGen().inputs(["foo.proto", "bar.proto"]).include("protos").generate_and_compile()

    ``environ`` defaults to :data:`os.environ`; it is read for ``OUT_DIR`` at
    construction and for the upb version, include directory and package name
    when the build steps run.
    """

    def __init__(
        self,
        output_dir: Optional[PathLike] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.environ: Mapping[str, str] = os.environ if environ is None else environ
        if output_dir is None:
            out_dir = self.environ.get(OUT_DIR_ENV)
            if not out_dir:
                raise MissingEnvironmentError(
                    f"{OUT_DIR_ENV} is not set; pass output_dir explicitly when running outside a build script"
                )
            resolved = Path(out_dir) / GENERATED_DIR_NAME
        else:
            resolved = _non_empty_path(output_dir)
        self.config = CodeGenConfig(output_dir=resolved)
        self._tracked: List[Path] = []

    def input(self, path: PathLike) -> "CodeGen":
        self.config.inputs.append(Path(path))
        return self

    def inputs(self, paths: Iterable[PathLike]) -> "CodeGen":
        self.config.inputs.extend(Path(path) for path in paths)
        return self

    def output_dir(self, path: PathLike) -> "CodeGen":
        self.config.output_dir = _non_empty_path(path)
        return self

    def protoc_path(self, path: PathLike) -> "CodeGen":
        self.config.protoc_path = Path(path)
        return self

    def protoc_gen_upb_minitable_path(self, path: PathLike) -> "CodeGen":
        self.config.protoc_gen_upb_minitable_path = Path(path)
        return self

    def include(self, path: PathLike) -> "CodeGen":
        self.config.includes.append(Path(path))
        return self

    def includes(self, paths: Iterable[PathLike]) -> "CodeGen":
        self.config.includes.extend(Path(path) for path in paths)
        return self

    def package_name(self, name: str) -> "CodeGen":
        self.config.package_name = name
        return self

    def expected_generated_rs_files(self) -> List[Path]:
        return [derive_generated_path(self.config.output_dir, src, RUST_SUFFIX) for src in self.config.inputs]

    def expected_generated_c_files(self) -> List[Path]:
        return [derive_generated_path(self.config.output_dir, src, MINITABLE_SUFFIX) for src in self.config.inputs]

    def expected_generated_files(self) -> GeneratedFiles:
        return GeneratedFiles(
            rust_files=tuple(self.expected_generated_rs_files()),
            minitable_files=tuple(self.expected_generated_c_files()),
        )

    def tracked_paths(self) -> List[Path]:
        """Paths the consuming build should watch, in the order they were recorded."""

        return list(self._tracked)

    def _track(self, path: Path) -> None:
        if path not in self._tracked:
            self._tracked.append(path)

    def _require_env(self, name: str) -> str:
        value = self.environ.get(name)
        if not value:
            hint = _ENV_HINTS.get(name, "set it in the build environment")
            raise MissingEnvironmentError(f"{name} should have been set, {hint}")
        return value

    def check_version(self) -> None:
        upb_version = self._require_env(UPB_VERSION_ENV)
        if upb_version != __version__:
            raise VersionMismatchError(
                f"upb-codegen version {__version__} does not match upb runtime version {upb_version}."
            )

    def _resolve_protoc(self) -> Path:
        if self.config.protoc_path is not None:
            return self.config.protoc_path
        path = binaries.protoc_path()
        if path is None:
            raise UnsupportedPlatformError("no bundled protoc for this platform; set protoc_path explicitly")
        return path

    def _resolve_plugin(self) -> Path:
        if self.config.protoc_gen_upb_minitable_path is not None:
            return self.config.protoc_gen_upb_minitable_path
        path = binaries.protoc_gen_upb_minitable_path()
        if path is None:
            raise UnsupportedPlatformError(
                "no bundled protoc-gen-upb_minitable for this platform; set protoc_gen_upb_minitable_path explicitly"
            )
        return path

    def library_name(self) -> str:
        name = self.config.package_name or self._require_env(PACKAGE_NAME_ENV)
        return f"{name}{LIBRARY_SUFFIX}"

    def generate(self) -> None:
        """Run protoc over the configured inputs."""

        self.check_version()
        protoc = self._resolve_protoc()
        ensure_output_directory(self.config.output_dir)
        plugin = self._resolve_plugin()

        for include in self.config.includes:
            self._track(include)

        cmd = build_protoc_command(
            protoc,
            self.config.inputs,
            output_dir=self.config.output_dir,
            plugin=plugin,
            includes=self.config.includes,
        )
        run_protoc(cmd)

    def compile_only(self) -> StaticLibrary:
        """Build the generated C code into a static library.

        Raises :class:`MissingGeneratedFileError` naming the first expected
        file that is absent; no compiler is invoked in that case.
        """

        upb_include = Path(self._require_env(UPB_INCLUDE_ENV))

        for path in self.expected_generated_rs_files():
            if not path.exists():
                raise MissingGeneratedFileError(path)
            self._track(path)

        sources: List[Path] = []
        for path in self.expected_generated_c_files():
            if not path.exists():
                raise MissingGeneratedFileError(path)
            self._track(path)
            sources.append(path)

        name = self.library_name()
        return compile_static_library(
            sources,
            name=name,
            output_dir=self.config.output_dir,
            include_dirs=[upb_include, self.config.output_dir],
            environ=self.environ,
        )

    def generate_and_compile(self) -> StaticLibrary:
        self.generate()
        return self.compile_only()

    def __repr__(self) -> str:
        return f"CodeGen({self.config!r})"


__all__ = ["CodeGen", "derive_generated_path"]
