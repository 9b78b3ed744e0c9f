"""Drive protoc to generate upb Rust code and compile its minitables into a static library."""
from __future__ import annotations

__version__ = "4.31.0"

from .codegen import CodeGen, derive_generated_path
from .domain.models import BuildOptions, BuildResult, CodeGenConfig, GeneratedFiles, StaticLibrary
from .pipeline import build_and_persist
from .toolchain.binaries import protoc_gen_upb_minitable_path, protoc_path

__all__ = [
    "__version__",
    "CodeGen",
    "CodeGenConfig",
    "BuildOptions",
    "BuildResult",
    "GeneratedFiles",
    "StaticLibrary",
    "build_and_persist",
    "derive_generated_path",
    "protoc_path",
    "protoc_gen_upb_minitable_path",
]
