from __future__ import annotations

from pathlib import Path

import pytest

from upb_codegen.codegen import CodeGen, derive_generated_path
from upb_codegen.utils.errors import MissingEnvironmentError


def test_expected_files_replace_extension_under_output_dir(tmp_path: Path) -> None:
    out = tmp_path / "gen"
    codegen = CodeGen(out, environ={}).input("foo/bar.proto").input("baz.proto")

    assert codegen.expected_generated_rs_files() == [out / "foo/bar.u.pb.rs", out / "baz.u.pb.rs"]
    assert codegen.expected_generated_c_files() == [
        out / "foo/bar.upb_minitable.c",
        out / "baz.upb_minitable.c",
    ]


def test_only_last_extension_is_replaced() -> None:
    assert derive_generated_path(Path("out"), Path("a.b.proto"), ".u.pb.rs") == Path("out/a.b.u.pb.rs")


def test_input_without_extension_gets_suffix_appended() -> None:
    assert derive_generated_path(Path("out"), Path("schema"), ".upb_minitable.c") == Path("out/schema.upb_minitable.c")


@pytest.mark.parametrize("bad", ["", ".."])
def test_input_without_file_name_is_a_programming_error(bad: str) -> None:
    with pytest.raises(ValueError, match="no file name"):
        derive_generated_path(Path("out"), Path(bad), ".u.pb.rs")


def test_default_output_dir_comes_from_out_dir(tmp_path: Path) -> None:
    codegen = CodeGen(environ={"OUT_DIR": str(tmp_path)})

    assert codegen.config.output_dir == tmp_path / "protobuf_generated"


def test_missing_out_dir_without_explicit_output_dir_fails() -> None:
    with pytest.raises(MissingEnvironmentError, match="OUT_DIR"):
        CodeGen(environ={})


def test_empty_output_dir_is_rejected(tmp_path: Path) -> None:
    codegen = CodeGen(tmp_path, environ={})

    with pytest.raises(ValueError):
        codegen.output_dir("")


def test_setters_chain_and_preserve_order(tmp_path: Path) -> None:
    codegen = CodeGen(tmp_path, environ={})

    returned = (
        codegen.inputs(["b.proto", "a.proto"])
        .input("c.proto")
        .include("first")
        .includes(iter(["second", "third"]))
        .protoc_path("/opt/protoc")
        .protoc_gen_upb_minitable_path("/opt/plugin")
        .output_dir(tmp_path / "elsewhere")
        .package_name("widgets")
    )

    assert returned is codegen
    assert codegen.config.inputs == [Path("b.proto"), Path("a.proto"), Path("c.proto")]
    assert codegen.config.includes == [Path("first"), Path("second"), Path("third")]
    assert codegen.config.protoc_path == Path("/opt/protoc")
    assert codegen.config.protoc_gen_upb_minitable_path == Path("/opt/plugin")
    assert codegen.config.output_dir == tmp_path / "elsewhere"
    assert codegen.library_name() == "widgets_upb_gen_code"


def test_library_name_defaults_to_package_env(tmp_path: Path) -> None:
    codegen = CodeGen(tmp_path, environ={"CARGO_PKG_NAME": "demo"})

    assert codegen.library_name() == "demo_upb_gen_code"


def test_trailing_dot_is_an_empty_extension() -> None:
    assert derive_generated_path(Path("out"), Path("foo."), ".u.pb.rs") == Path("out/foo.u.pb.rs")
    assert derive_generated_path(Path("out"), Path("foo.."), ".u.pb.rs") == Path("out/foo..u.pb.rs")


def test_leading_dot_belongs_to_the_stem() -> None:
    assert derive_generated_path(Path("out"), Path(".hidden"), ".u.pb.rs") == Path("out/.hidden.u.pb.rs")
    assert derive_generated_path(Path("out"), Path("d/.hidden.proto"), ".upb_minitable.c") == Path(
        "out/d/.hidden.upb_minitable.c"
    )


def test_missing_package_name_hint_points_at_the_setter(tmp_path: Path) -> None:
    codegen = CodeGen(tmp_path, environ={})

    with pytest.raises(MissingEnvironmentError, match=r"CARGO_PKG_NAME.*package_name\(\.\.\.\)"):
        codegen.library_name()


def test_missing_runtime_variable_hint_names_the_dependency(tmp_path: Path) -> None:
    codegen = CodeGen(tmp_path, environ={})

    with pytest.raises(MissingEnvironmentError, match="DEP_UPB_VERSION.*upb runtime package is a dependency"):
        codegen.check_version()
