"""Tests for the protoc integration helpers."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import pytest

from upb_codegen.toolchain import protoc
from upb_codegen.utils.errors import ProtocExecutionError, ProtocLaunchError


def test_build_protoc_command_orders_inputs_flags_and_includes() -> None:
    cmd = protoc.build_protoc_command(
        Path("/bin/protoc"),
        [Path("a.proto"), Path("sub/b.proto")],
        output_dir=Path("/out"),
        plugin=Path("/bin/protoc-gen-upb_minitable"),
        includes=[Path("protos"), Path("third_party")],
    )

    assert cmd == [
        "/bin/protoc",
        "a.proto",
        str(Path("sub/b.proto")),
        "--rust_out=/out",
        "--rust_opt=experimental-codegen=enabled,kernel=upb",
        "--plugin=protoc-gen-upb_minitable=/bin/protoc-gen-upb_minitable",
        "--upb_minitable_out=/out",
        "--proto_path=protos",
        "--proto_path=third_party",
    ]


def test_build_protoc_command_without_includes_has_no_proto_path() -> None:
    cmd = protoc.build_protoc_command(
        Path("protoc"), [Path("a.proto")], output_dir=Path("out"), plugin=Path("plugin")
    )

    assert not any(arg.startswith("--proto_path") for arg in cmd)


def test_run_protoc_logs_output(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    class _Completed:
        returncode = 0
        stdout = "generated 2 files"
        stderr = "warning: unused import"

    monkeypatch.setattr(protoc.subprocess, "run", lambda cmd, **_: _Completed())
    caplog.set_level(logging.INFO, logger="upb_codegen")

    protoc.run_protoc(["protoc", "a.proto"])

    assert "protoc: protoc a.proto" in caplog.text
    assert "generated 2 files" in caplog.text
    assert "warning: unused import" in caplog.text


def test_run_protoc_non_zero_exit_is_fatal(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    def fake_run(cmd, **_):
        raise subprocess.CalledProcessError(3, cmd, output="", stderr="a.proto: File not found.")

    monkeypatch.setattr(protoc.subprocess, "run", fake_run)

    with pytest.raises(ProtocExecutionError, match="rc=3"):
        protoc.run_protoc(["protoc", "a.proto"])
    assert "a.proto: File not found." in caplog.text


def test_run_protoc_launch_failure_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **_):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(protoc.subprocess, "run", fake_run)

    with pytest.raises(ProtocLaunchError, match="failed to run protoc"):
        protoc.run_protoc(["/missing/protoc", "a.proto"])


def test_run_protoc_decodes_output_leniently(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict = {}

    class _Completed:
        returncode = 0
        stdout = "caf�"
        stderr = ""

    def fake_run(cmd, **kwargs):
        seen.update(kwargs)
        return _Completed()

    monkeypatch.setattr(protoc.subprocess, "run", fake_run)

    protoc.run_protoc(["protoc", "a.proto"])

    assert seen["encoding"] == "utf-8"
    assert seen["errors"] == "replace"
