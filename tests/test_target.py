import pytest

from plrustkit.errors import UnsupportedTarget
from plrustkit.target import (
    CompilationTarget,
    CrossCompilationTarget,
    host_target_tuple,
    host_tuple,
)


def test_host_target_tuple_joins_parts():
    assert host_target_tuple("x86_64", "unknown", "linux", "gnu") == "x86_64-unknown-linux-gnu"


def test_host_target_tuple_skips_empty_parts():
    assert host_target_tuple("aarch64", "apple-darwin", "postgres", "") == (
        "aarch64-apple-darwin-postgres"
    )


def test_host_tuple_starts_with_a_known_shape():
    untrusted = host_tuple(False)
    trusted = host_tuple(True)
    arch = untrusted.split("-")[0]
    assert trusted.split("-")[0] == arch
    assert trusted != untrusted
    assert "postgres" in trusted


def test_from_name_known():
    assert CrossCompilationTarget.from_name("x86_64") is CrossCompilationTarget.X86_64
    assert CrossCompilationTarget.from_name("aarch64") is CrossCompilationTarget.AARCH64


@pytest.mark.parametrize("name", ["", "riscv64", "X86_64", " x86_64"])
def test_from_name_unsupported(name):
    with pytest.raises(UnsupportedTarget):
        CrossCompilationTarget.from_name(name)


def test_display_is_arch_name():
    assert str(CrossCompilationTarget.from_name("x86_64")) == "x86_64"
    assert str(CrossCompilationTarget.from_name("aarch64")) == "aarch64"


@pytest.mark.parametrize(
    "target, trusted, os_name, expected",
    [
        (CrossCompilationTarget.X86_64, False, "linux", "x86_64-unknown-linux-gnu"),
        (CrossCompilationTarget.AARCH64, False, "linux", "aarch64-unknown-linux-gnu"),
        (CrossCompilationTarget.X86_64, True, "linux", "x86_64-postgres-linux-gnu"),
        (CrossCompilationTarget.AARCH64, True, "linux", "aarch64-postgres-linux-gnu"),
        (CrossCompilationTarget.X86_64, False, "macos", "x86_64-apple-darwin"),
        (CrossCompilationTarget.AARCH64, True, "macos", "aarch64-apple-darwin-postgres"),
    ],
)
def test_target_triples(target, trusted, os_name, expected):
    result = target.target(trusted, os_name)
    assert result == expected
    assert isinstance(result, CompilationTarget)


def test_linker_envar_default_linux():
    key, linker = CrossCompilationTarget.AARCH64.linker_envar(None, False, "linux")
    assert key == "CARGO_TARGET_AARCH64_UNKNOWN_LINUX_GNU_LINKER"
    assert linker == "aarch64-linux-gnu-gcc"


def test_linker_envar_default_macos():
    key, linker = CrossCompilationTarget.X86_64.linker_envar(None, False, "macos")
    assert linker == "cc"
    assert key.startswith("CARGO_TARGET_") and key.endswith("_LINKER")
    assert "-" not in key


def test_linker_envar_configured():
    _, linker = CrossCompilationTarget.X86_64.linker_envar("my-ld", False, "linux")
    assert linker == "my-ld"


def test_bindings_envar():
    assert CrossCompilationTarget.X86_64.bindings_envar(None, 15) is None
    key, path = CrossCompilationTarget.X86_64.bindings_envar("/tmp/b.txt", 15)
    assert key == "PGRX_TARGET_INFO_PATH_PG15"
    assert path == "/tmp/b.txt"