"""Command line interface for generating and compiling upb code."""
from __future__ import annotations

import argparse
from pathlib import Path

from ..domain.models import BuildOptions, ConfigOverrides
from ..pipeline import build_and_persist
from ..utils.constants import SCHEMA_JSON_PATH
from ..utils.errors import FatalBuildError, RecoverableBuildError
from ..utils.logging import get_logger

LOG = get_logger()

EXIT_OK = 0
EXIT_REPORTED = 1
EXIT_FATAL = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upb-codegen",
        description="Generate Rust/upb sources with protoc and compile the minitables into a static library",
    )
    parser.add_argument("config", type=Path, nargs="?", help="Path to the JSON build configuration")
    parser.add_argument(
        "--input",
        "-i",
        dest="inputs",
        type=Path,
        action="append",
        help="Input .proto file (repeatable; replaces the config's inputs)",
    )
    parser.add_argument(
        "--include",
        "-I",
        dest="includes",
        type=Path,
        action="append",
        help="Include directory passed to protoc as --proto_path (repeatable)",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        help="Directory receiving generated files (default: $OUT_DIR/protobuf_generated)",
    )
    parser.add_argument("--protoc", type=Path, help="Path to protoc (default: bundled binary)")
    parser.add_argument(
        "--plugin",
        type=Path,
        help="Path to protoc-gen-upb_minitable (default: bundled binary)",
    )
    parser.add_argument("--package-name", "-p", help="Consuming package name (default: $CARGO_PKG_NAME)")
    parser.add_argument(
        "--compile-only",
        "-c",
        action="store_true",
        help="Skip protoc and only compile previously generated files",
    )
    parser.add_argument(
        "--schema",
        "-sc",
        type=Path,
        default=SCHEMA_JSON_PATH,
        help="Path to the config JSON schema (default: bundled schema.json)",
    )
    parser.add_argument("--log-file", "-lf", type=Path, help="Also write the build log to this file")
    parser.add_argument("--no-console-log", "-nl", action="store_true", help="Disable console logging")
    parser.add_argument("--no-manifest", action="store_true", help="Do not write the build manifest")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _build_options(args: argparse.Namespace) -> BuildOptions:
    return BuildOptions(
        config_path=args.config,
        schema_path=args.schema,
        compile_only=args.compile_only,
        console_log=not args.no_console_log,
        log_file=args.log_file,
        write_manifest=not args.no_manifest,
    )


def _build_overrides(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        inputs=tuple(args.inputs or ()),
        includes=tuple(args.includes or ()),
        output_dir=args.output_dir,
        protoc_path=args.protoc,
        protoc_gen_upb_minitable_path=args.plugin,
        package_name=args.package_name,
    )


def _run_with_args(args: argparse.Namespace) -> int:
    if args.config is None and not args.inputs:
        raise SystemExit("Either a config file or at least one --input is required.")
    if args.config is not None and not args.config.exists():
        raise SystemExit(f"config file not found: {args.config}")

    options = _build_options(args)
    overrides = _build_overrides(args)
    try:
        result = build_and_persist(options, overrides)
    except RecoverableBuildError as exc:
        LOG.error("%s", exc)
        return EXIT_REPORTED
    except FatalBuildError as exc:
        LOG.critical("%s", exc)
        return EXIT_FATAL

    if result.manifest_path is not None:
        print(result.manifest_path)
    else:
        print(result.library.path)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    return _run_with_args(args)


if __name__ == "__main__":
    raise SystemExit(main())
