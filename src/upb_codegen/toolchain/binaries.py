"""Locate the protoc binaries bundled with the package for the host platform."""
from __future__ import annotations

import platform
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..utils.constants import BUNDLED_BIN_DIR, MINITABLE_PLUGIN_NAME, PROTOC_NAME

# (system, normalised machine) -> bundled directory name
_PLATFORM_DIRS: Dict[Tuple[str, str], str] = {
    ("darwin", "x86_64"): "osx-x86_64",
    ("darwin", "aarch64"): "osx-aarch_64",
    ("linux", "aarch64"): "linux-aarch_64",
    ("linux", "ppc64"): "linux-ppcle_64",
    ("linux", "s390x"): "linux-s390_64",
    ("linux", "x86"): "linux-x86_32",
    ("linux", "x86_64"): "linux-x86_64",
    ("windows", "x86"): "win32",
    ("windows", "x86_64"): "win64",
}

_MACHINE_ALIASES: Dict[str, str] = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "ppc64le": "ppc64",
    "powerpc64": "ppc64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
}


def _normalise_machine(machine: str) -> str:
    machine = machine.lower()
    return _MACHINE_ALIASES.get(machine, machine)


def bundled_bin_dir(system: Optional[str] = None, machine: Optional[str] = None) -> Optional[Path]:
    """Return the bundled binary directory for the platform, or ``None`` if unsupported."""

    system = (system if system is not None else platform.system()).lower()
    machine = _normalise_machine(machine if machine is not None else platform.machine())
    dir_name = _PLATFORM_DIRS.get((system, machine))
    if dir_name is None:
        return None
    return BUNDLED_BIN_DIR / dir_name


def protoc_path(system: Optional[str] = None, machine: Optional[str] = None) -> Optional[Path]:
    base = bundled_bin_dir(system, machine)
    if base is None:
        return None
    return base / PROTOC_NAME


def protoc_gen_upb_minitable_path(system: Optional[str] = None, machine: Optional[str] = None) -> Optional[Path]:
    base = bundled_bin_dir(system, machine)
    if base is None:
        return None
    return base / MINITABLE_PLUGIN_NAME


__all__ = ["bundled_bin_dir", "protoc_path", "protoc_gen_upb_minitable_path"]
