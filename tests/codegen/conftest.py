from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

import upb_codegen
from upb_codegen.utils.logging import get_logger


class _CompletedProcess:
    """Minimal stand-in for ``subprocess.CompletedProcess``."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class FakeToolchain:
    """Records every command and mimics protoc, cc and ar on the filesystem."""

    def __init__(self) -> None:
        self.commands: List[List[str]] = []
        self.fail_tool: Optional[str] = None
        self.fail_returncode = 1
        self.skip_outputs: set[str] = set()

    def tool_calls(self, tool: str) -> List[List[str]]:
        return [cmd for cmd in self.commands if Path(cmd[0]).name == tool]

    def __call__(self, cmd: List[str], **_: object) -> _CompletedProcess:
        self.commands.append(list(cmd))
        tool = Path(cmd[0]).name
        if tool == self.fail_tool:
            raise subprocess.CalledProcessError(self.fail_returncode, cmd, output="", stderr=f"{tool}: boom")
        if tool == "protoc":
            self._fake_protoc(cmd)
        elif tool == "cc":
            obj = Path(cmd[cmd.index("-o") + 1])
            obj.write_bytes(b"\x7fELF")
        elif tool == "ar":
            Path(cmd[2]).write_bytes(b"!<arch>\n")
        return _CompletedProcess(stdout=f"{tool} ok")

    def _fake_protoc(self, cmd: List[str]) -> None:
        out_dir = Path(next(arg for arg in cmd if arg.startswith("--rust_out=")).split("=", 1)[1])
        inputs = [Path(arg) for arg in cmd[1:] if not arg.startswith("--")]
        for source in inputs:
            for suffix in (".u.pb.rs", ".upb_minitable.c"):
                target = out_dir / source.with_suffix(suffix)
                if target.name in self.skip_outputs:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text("// generated\n", encoding="utf-8")


@pytest.fixture
def toolchain(monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    fake = FakeToolchain()
    monkeypatch.setattr("upb_codegen.toolchain.protoc.subprocess.run", fake)
    monkeypatch.setattr("upb_codegen.toolchain.cc.subprocess.run", fake)
    return fake


@pytest.fixture
def environ(tmp_path: Path) -> Dict[str, str]:
    upb_include = tmp_path / "upb_include"
    upb_include.mkdir()
    return {
        "OUT_DIR": str(tmp_path / "target"),
        "DEP_UPB_VERSION": upb_codegen.__version__,
        "DEP_UPB_INCLUDE": str(upb_include),
        "CARGO_PKG_NAME": "demo",
        "CC": "cc",
        "AR": "ar",
    }


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
