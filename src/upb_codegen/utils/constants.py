"""Shared constants: file suffixes, environment variables and tool names."""
from __future__ import annotations

from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
SCHEMA_JSON_PATH = PACKAGE_ROOT / "data" / "schema.json"
BUNDLED_BIN_DIR = PACKAGE_ROOT / "bin"

GENERATED_DIR_NAME = "protobuf_generated"
RUST_SUFFIX = ".u.pb.rs"
MINITABLE_SUFFIX = ".upb_minitable.c"
LIBRARY_SUFFIX = "_upb_gen_code"
OBJECT_DIR_NAME = ".objects"
MANIFEST_NAME = "codegen_manifest.json"

OUT_DIR_ENV = "OUT_DIR"
UPB_VERSION_ENV = "DEP_UPB_VERSION"
UPB_INCLUDE_ENV = "DEP_UPB_INCLUDE"
PACKAGE_NAME_ENV = "CARGO_PKG_NAME"
CC_ENV = "CC"
AR_ENV = "AR"
CFLAGS_ENV = "CFLAGS"

PROTOC_NAME = "protoc"
MINITABLE_PLUGIN_NAME = "protoc-gen-upb_minitable"
DEFAULT_CC = "cc"
DEFAULT_AR = "ar"
C_STANDARD_FLAG = "-std=c99"
RUST_CODEGEN_OPTIONS = "experimental-codegen=enabled,kernel=upb"

SUPPORTED_CONFIG_VERSION_PREFIX = "1."
