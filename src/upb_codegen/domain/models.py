"""Domain models for a single code generation run and its artefacts."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..utils.constants import SCHEMA_JSON_PATH


@dataclass
class CodeGenConfig:
    """Mutable build configuration owned by one :class:`~upb_codegen.codegen.CodeGen`."""

    output_dir: Path
    inputs: List[Path] = field(default_factory=list)
    includes: List[Path] = field(default_factory=list)
    protoc_path: Optional[Path] = None
    protoc_gen_upb_minitable_path: Optional[Path] = None
    package_name: Optional[str] = None


@dataclass(frozen=True)
class GeneratedFiles:
    """Files protoc is expected to emit, ordered like the inputs."""

    rust_files: Tuple[Path, ...]
    minitable_files: Tuple[Path, ...]

    def all(self) -> Tuple[Path, ...]:
        return self.rust_files + self.minitable_files


@dataclass(frozen=True)
class StaticLibrary:
    """A compiled archive ready to be linked into the consuming build."""

    name: str
    path: Path
    search_dir: Path
    include_dirs: Tuple[Path, ...]
    sources: Tuple[Path, ...]
    objects: Tuple[Path, ...]

    def link_args(self) -> List[str]:
        return [f"-L{self.search_dir}", f"-l{self.name}"]


@dataclass(frozen=True)
class BuildOptions:
    """Options controlling one CLI-driven build."""

    config_path: Optional[Path] = None
    schema_path: Path = SCHEMA_JSON_PATH
    compile_only: bool = False
    console_log: bool = True
    log_file: Optional[Path] = None
    write_manifest: bool = True


@dataclass(frozen=True)
class ConfigOverrides:
    """Values supplied on the command line that take precedence over the config file."""

    inputs: Tuple[Path, ...] = ()
    includes: Tuple[Path, ...] = ()
    output_dir: Optional[Path] = None
    protoc_path: Optional[Path] = None
    protoc_gen_upb_minitable_path: Optional[Path] = None
    package_name: Optional[str] = None


@dataclass
class BuildResult:
    library: StaticLibrary
    generated: GeneratedFiles
    manifest_path: Optional[Path] = None
