"""Compilation targets for user functions.

Builds always name their target explicitly, so that artifacts for several
architectures never end up in an unlabelled directory.
"""

from __future__ import annotations

import platform
import sys
from enum import Enum

from plrustkit.errors import UnsupportedTarget


class CompilationTarget(str):
    """A target triple such as ``x86_64-unknown-linux-gnu``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"CompilationTarget({str.__repr__(self)})"


def _host_arch() -> str:
    machine = platform.machine().lower()
    if machine in ("amd64", "x86_64", "x64"):
        return "x86_64"
    if machine in ("arm64", "aarch64"):
        return "aarch64"
    return machine


def _host_os() -> str:
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform.rstrip("0123456789")


def _host_env(os_name: str) -> str:
    if os_name != "linux":
        return ""
    libc, _ = platform.libc_ver()
    if libc == "glibc":
        return "gnu"
    if libc == "musl":
        return "musl"
    return ""


def _vendor(trusted: bool, os_name: str) -> str:
    if trusted:
        return "apple-darwin" if os_name == "macos" else "postgres"
    if os_name == "macos":
        return "apple"
    if os_name == "windows":
        return "pc"
    return "unknown"


def _os_part(trusted: bool, os_name: str) -> str:
    if os_name == "macos":
        return "postgres" if trusted else "darwin"
    return os_name


def host_target_tuple(arch: str, vendor: str, os_name: str, env: str) -> str:
    """Join the parts of a target triple with ``-``, skipping empty parts after the first."""
    return "-".join([arch, *(part for part in (vendor, os_name, env) if part)])


def host_tuple(trusted: bool = False) -> CompilationTarget:
    """The target triple of the machine running this code."""
    os_name = _host_os()
    return CompilationTarget(
        host_target_tuple(
            _host_arch(),
            _vendor(trusted, os_name),
            _os_part(trusted, os_name),
            _host_env(os_name),
        )
    )


_TARGETS = {
    ("macos", True): {
        "x86_64": "x86_64-apple-darwin-postgres",
        "aarch64": "aarch64-apple-darwin-postgres",
    },
    ("macos", False): {
        "x86_64": "x86_64-apple-darwin",
        "aarch64": "aarch64-apple-darwin",
    },
    ("linux", True): {
        "x86_64": "x86_64-postgres-linux-gnu",
        "aarch64": "aarch64-postgres-linux-gnu",
    },
    ("linux", False): {
        "x86_64": "x86_64-unknown-linux-gnu",
        "aarch64": "aarch64-unknown-linux-gnu",
    },
}

_DEFAULT_LINKERS = {
    "macos": {"x86_64": "cc", "aarch64": "cc"},
    "linux": {"x86_64": "x86_64-linux-gnu-gcc", "aarch64": "aarch64-linux-gnu-gcc"},
}


class CrossCompilationTarget(Enum):
    """An architecture a function may additionally be compiled for."""

    X86_64 = "x86_64"
    AARCH64 = "aarch64"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, value: str) -> "CrossCompilationTarget":
        """Look up a target by architecture name; raise for unknown names."""
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedTarget() from None

    def target(self, trusted: bool = False, os_name: str | None = None) -> CompilationTarget:
        """The full target triple for this architecture."""
        os_name = os_name or _host_os()
        family = "macos" if os_name == "macos" else "linux"
        return CompilationTarget(_TARGETS[(family, trusted)][self.value])

    def linker_envar(
        self,
        linker: str | None = None,
        trusted: bool = False,
        os_name: str | None = None,
    ) -> tuple[str, str]:
        """The cargo environment variable naming the linker, and its value."""
        os_name = os_name or _host_os()
        triple = self.target(trusted, os_name)
        key = f"CARGO_TARGET_{triple.upper().replace('-', '_')}_LINKER"
        if linker is None:
            family = "macos" if os_name == "macos" else "linux"
            linker = _DEFAULT_LINKERS[family][self.value]
        return key, linker

    def bindings_envar(self, path: str | None, pg_major: int) -> tuple[str, str] | None:
        """The environment variable pointing at pgrx bindings, when a path is configured."""
        if path is None:
            return None
        return f"PGRX_TARGET_INFO_PATH_PG{pg_major}", path