"""Filesystem helpers for the generated output tree."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from .logging import get_logger

LOG = get_logger()


def ensure_output_directory(outdir: Path) -> bool:
    """Create ``outdir`` if it is missing; failures are logged, never raised."""

    if outdir.exists():
        return True
    try:
        outdir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOG.warning("could not create output directory %s: %s", outdir, exc)
        return False
    LOG.info("created output directory: %s", outdir)
    return True


def manifest_value(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        try:
            return Path(os.path.relpath(path, base)).as_posix()
        except ValueError:
            return path.resolve().as_posix()


def write_manifest(manifest_path: Path, payload: Mapping[str, object]) -> Path:
    _write_text(manifest_path, json.dumps(payload, indent=2, ensure_ascii=False))
    return manifest_path


def _write_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")


__all__ = ["ensure_output_directory", "manifest_value", "write_manifest"]
