from pathlib import Path

import pytest

from plrustkit.errors import PlRustError, UnsupportedTarget
from plrustkit.settings import DEFAULT_LINTS, Settings, parse_lints
from plrustkit.target import CrossCompilationTarget


def test_parse_lints_default_list():
    lints = parse_lints(DEFAULT_LINTS)
    assert lints[0] == "plrust_extern_blocks"
    assert lints[-1] == "soft_unstable"
    assert "unsafe_code" in lints
    assert all(name == name.strip() and name for name in lints)


def test_parse_lints_drops_blanks_and_duplicates():
    assert parse_lints(" a, b,, a ,c ") == ("a", "b", "c")
    assert parse_lints("") == ()


def test_default_settings():
    settings = Settings()
    assert settings.compile_lints == parse_lints(DEFAULT_LINTS)
    assert settings.required_lints == ()
    assert settings.tracing_level_name() == "INFO"


def test_work_dir_path():
    settings = Settings.from_options({"plrust.work_dir": "/tmp/plrust"})
    assert settings.work_dir_path() == Path("/tmp/plrust")


def test_work_dir_missing():
    with pytest.raises(PlRustError):
        Settings.from_options({}).work_dir_path()


@pytest.mark.parametrize("value, expected", [("trace", "TRACE"), ("Debug", "DEBUG"), ("error", "ERROR")])
def test_tracing_level(value, expected):
    assert Settings.from_options({"plrust.tracing_level": value}).tracing_level_name() == expected


def test_tracing_level_invalid():
    with pytest.raises(PlRustError):
        Settings.from_options({"plrust.tracing_level": "loud"}).tracing_level_name()


def test_option_names_are_case_insensitive():
    settings = Settings.from_options({"plrust.PATH_override": "/usr/bin"})
    assert settings.path_override == "/usr/bin"


def test_lint_options_are_parsed():
    settings = Settings.from_options(
        {"plrust.compile_lints": "unsafe_code, deprecated", "plrust.required_lints": "unsafe_code"}
    )
    assert settings.compile_lints == ("unsafe_code", "deprecated")
    assert settings.required_lints == ("unsafe_code",)


def test_compilation_targets_excludes_host():
    settings = Settings.from_options({"plrust.compilation_targets": "x86_64, aarch64"})
    this_target, others = settings.compilation_targets("x86_64")
    assert others == [CrossCompilationTarget.AARCH64]
    assert this_target == settings.compilation_targets("aarch64")[0]


def test_compilation_targets_unset():
    _, others = Settings().compilation_targets("x86_64")
    assert others == []


def test_compilation_targets_unsupported():
    settings = Settings.from_options({"plrust.compilation_targets": "x86_64, sparc"})
    with pytest.raises(UnsupportedTarget):
        settings.compilation_targets("x86_64")


def test_linker_and_bindings_lookup():
    settings = Settings.from_options(
        {
            "plrust.aarch64_linker": "my-ld",
            "plrust.x86_64_pgrx_bindings_path": "/tmp/bindings.txt",
        }
    )
    assert settings.linker_for_target(CrossCompilationTarget.AARCH64) == "my-ld"
    assert settings.linker_for_target(CrossCompilationTarget.X86_64) is None
    assert settings.pgrx_bindings_for_target(CrossCompilationTarget.X86_64) == "/tmp/bindings.txt"
    assert settings.pgrx_bindings_for_target(CrossCompilationTarget.AARCH64) is None


def test_trusted_pgrx_requirement():
    settings = Settings.from_options({"plrust.trusted_pgrx_version": "1.2.3"})
    assert settings.trusted_pgrx_requirement() == "=1.2.3"
    assert Settings().trusted_pgrx_requirement().startswith("=")


def test_trusted_pgrx_requirement_missing():
    with pytest.raises(PlRustError):
        Settings(trusted_pgrx_version=None).trusted_pgrx_requirement()