"""Load and validate JSON build configurations."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Mapping, Optional, Type

from jsonschema import Draft7Validator  # type: ignore

from ..codegen import CodeGen
from ..domain.models import ConfigOverrides
from ..utils.constants import SUPPORTED_CONFIG_VERSION_PREFIX
from ..utils.errors import (
    BuildError,
    ConfigFileNotFound,
    InvalidConfigurationError,
    SchemaFileNotFound,
    SchemaValidationError,
    UnsupportedVersionError,
)
from ..utils.logging import get_logger

LOG = get_logger()


def load_json_file(json_path: Path, *, not_found: Type[BuildError] = ConfigFileNotFound) -> Dict:
    """Read a UTF-8 JSON document, raising ``not_found`` when the file is absent."""
    if not json_path.exists():
        raise not_found(f"JSON not found: {json_path}")
    with json_path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    LOG.info("loaded JSON: %s", json_path)
    return payload


def validate_json_schema(config_json: Dict, schema_json: Dict) -> None:
    validator = Draft7Validator(schema_json)
    errors = sorted(validator.iter_errors(config_json), key=lambda e: (list(e.path), list(e.schema_path)))
    if not errors:
        LOG.info("schema validation: PASSED")
        return
    LOG.error("[SCH] schema validation: FAILED (count=%d)", len(errors))
    for i, err in enumerate(errors, start=1):
        LOG.error("[SCH] #%d %s: %s (%s)", i, err.json_path, err.message, err.validator)
    raise SchemaValidationError(f"schema validation failed with {len(errors)} error(s)")


def ensure_supported_version(config_json: Dict) -> None:
    version = str(config_json.get("version", ""))
    if not version.startswith(SUPPORTED_CONFIG_VERSION_PREFIX):
        raise UnsupportedVersionError(f'unsupported "version": {version} (expected 1.*)')


def _optional_path(config_json: Mapping, key: str) -> Optional[Path]:
    value = config_json.get(key)
    if value is None:
        return None
    if not value:
        raise InvalidConfigurationError(f"{key} must not be empty")
    return Path(value)


def build_codegen(
    config_json: Mapping,
    overrides: Optional[ConfigOverrides] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> CodeGen:
    """Create a :class:`CodeGen` from a validated config, letting ``overrides`` win."""

    overrides = overrides or ConfigOverrides()

    output_dir = overrides.output_dir or _optional_path(config_json, "output_dir")
    codegen = CodeGen(output_dir, environ=environ)

    inputs = list(overrides.inputs) or [Path(p) for p in config_json.get("inputs", [])]
    if not inputs:
        raise InvalidConfigurationError("at least one input schema is required")
    codegen.inputs(inputs)
    codegen.includes(list(overrides.includes) or [Path(p) for p in config_json.get("includes", [])])

    protoc = overrides.protoc_path or _optional_path(config_json, "protoc")
    if protoc is not None:
        codegen.protoc_path(protoc)
    plugin = overrides.protoc_gen_upb_minitable_path or _optional_path(config_json, "protoc_gen_upb_minitable")
    if plugin is not None:
        codegen.protoc_gen_upb_minitable_path(plugin)

    package_name = overrides.package_name or config_json.get("package_name")
    if package_name:
        codegen.package_name(package_name)

    LOG.info(
        "config: inputs=%d includes=%d output_dir=%s",
        len(codegen.config.inputs),
        len(codegen.config.includes),
        codegen.config.output_dir,
    )
    return codegen


def load_codegen(
    config_path: Path,
    schema_path: Path,
    overrides: Optional[ConfigOverrides] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> CodeGen:
    config_json = load_json_file(config_path)
    schema_json = load_json_file(schema_path, not_found=SchemaFileNotFound)
    validate_json_schema(config_json, schema_json)
    ensure_supported_version(config_json)
    return build_codegen(config_json, overrides, environ=environ)


__all__ = [
    "build_codegen",
    "ensure_supported_version",
    "load_codegen",
    "load_json_file",
    "validate_json_schema",
]
