"""High-level orchestration: config -> protoc -> static library -> manifest."""
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from . import __version__
from .codegen import CodeGen
from .domain.models import BuildOptions, BuildResult, ConfigOverrides
from .parser.config_loader import build_codegen, load_codegen
from .utils.constants import MANIFEST_NAME
from .utils.io import manifest_value, write_manifest
from .utils.logging import configure_logger, get_logger

LOG = get_logger()


def _resolve_codegen(
    options: BuildOptions,
    overrides: ConfigOverrides,
    environ: Optional[Mapping[str, str]],
) -> CodeGen:
    if options.config_path is not None:
        return load_codegen(options.config_path, options.schema_path, overrides, environ=environ)
    return build_codegen({}, overrides, environ=environ)


def _manifest_payload(codegen: CodeGen, result: BuildResult) -> dict:
    base = codegen.config.output_dir
    library = result.library
    return {
        "generator_version": __version__,
        "output_dir": str(base.resolve()),
        "inputs": [path.as_posix() for path in codegen.config.inputs],
        "includes": [path.as_posix() for path in codegen.config.includes],
        "generated": {
            "rust": [manifest_value(path, base) for path in result.generated.rust_files],
            "minitable": [manifest_value(path, base) for path in result.generated.minitable_files],
        },
        "library": {
            "name": library.name,
            "path": str(library.path.resolve()),
            "search_dir": str(library.search_dir.resolve()),
            "link_args": library.link_args(),
            "include_dirs": [str(path) for path in library.include_dirs],
        },
        "tracked": [str(path) for path in codegen.tracked_paths()],
    }


def build_and_persist(
    options: BuildOptions,
    overrides: Optional[ConfigOverrides] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> BuildResult:
    configure_logger(options.log_file, console=options.console_log)
    codegen = _resolve_codegen(options, overrides or ConfigOverrides(), environ)
    LOG.info("outdir: %s", codegen.config.output_dir.resolve())

    if options.compile_only:
        LOG.info("compile-only requested. Skipping protoc generation")
        library = codegen.compile_only()
    else:
        library = codegen.generate_and_compile()

    result = BuildResult(library=library, generated=codegen.expected_generated_files())

    if options.write_manifest:
        manifest_path: Path = codegen.config.output_dir / MANIFEST_NAME
        result.manifest_path = write_manifest(manifest_path, _manifest_payload(codegen, result))
        LOG.info("manifest: %s", manifest_path.resolve())

    return result


__all__ = ["build_and_persist"]
