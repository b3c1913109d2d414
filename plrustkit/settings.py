"""Configuration options (``plrust.*``) and their interpretation."""

from __future__ import annotations

import platform
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from plrustkit.errors import PlRustError
from plrustkit.target import CompilationTarget, CrossCompilationTarget, host_tuple

DEFAULT_LINTS = (
    "plrust_extern_blocks, "
    "plrust_lifetime_parameterized_traits, "
    "implied_bounds_entailment, "
    "plrust_autotrait_impls, "
    "plrust_closure_trait_impl, "
    "plrust_static_impls, "
    "plrust_fn_pointers, "
    "plrust_filesystem_macros, "
    "plrust_env_macros, "
    "plrust_async, "
    "plrust_leaky, "
    "plrust_external_mod, "
    "plrust_print_macros, "
    "plrust_stdio, "
    "plrust_suspicious_trait_object, "
    "unsafe_code, "
    "deprecated, "
    "suspicious_auto_trait_impls, "
    "where_clauses_object_safety, "
    "soft_unstable"
)

TRUSTED_PGRX_VERSION = "1.2.8"

_TRACING_LEVELS = {
    "error": "ERROR",
    "warn": "WARN",
    "info": "INFO",
    "debug": "DEBUG",
    "trace": "TRACE",
    "1": "ERROR",
    "2": "WARN",
    "3": "INFO",
    "4": "DEBUG",
    "5": "TRACE",
}

_FIELDS = {
    "plrust.work_dir": "work_dir",
    "plrust.path_override": "path_override",
    "plrust.tracing_level": "tracing_level",
    "plrust.allowed_dependencies": "allowed_dependencies",
    "plrust.compilation_targets": "compilation_targets_spec",
    "plrust.trusted_pgrx_version": "trusted_pgrx_version",
}


def parse_lints(text: str) -> tuple[str, ...]:
    """Split a comma-separated lint list, dropping blanks and duplicates."""
    names = (part.strip() for part in text.split(","))
    return tuple(dict.fromkeys(name for name in names if name))


def _host_arch() -> str:
    machine = platform.machine().lower()
    if machine in ("amd64", "x86_64", "x64"):
        return "x86_64"
    if machine in ("arm64", "aarch64"):
        return "aarch64"
    return machine


@dataclass
class Settings:
    """The ``plrust.*`` settings in effect."""

    work_dir: str | None = None
    path_override: str | None = None
    tracing_level: str | None = None
    allowed_dependencies: str | None = None
    compilation_targets_spec: str | None = None
    compile_lints: tuple[str, ...] = field(default_factory=lambda: parse_lints(DEFAULT_LINTS))
    required_lints: tuple[str, ...] = ()
    trusted_pgrx_version: str | None = TRUSTED_PGRX_VERSION
    trusted: bool = False
    options: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Mapping[str, str]) -> "Settings":
        """Build settings from ``plrust.*`` option names; names are case-insensitive."""
        lowered = {key.lower(): value for key, value in options.items()}
        kwargs: dict[str, object] = {
            attr: lowered[key] for key, attr in _FIELDS.items() if key in lowered
        }
        if "plrust.compile_lints" in lowered:
            kwargs["compile_lints"] = parse_lints(lowered["plrust.compile_lints"])
        if "plrust.required_lints" in lowered:
            kwargs["required_lints"] = parse_lints(lowered["plrust.required_lints"])
        return cls(options=lowered, **kwargs)

    def work_dir_path(self) -> Path:
        """The directory in which functions are built."""
        if self.work_dir is None:
            raise PlRustError("plrust.work_dir is not set in postgresql.conf")
        if not self.work_dir:
            raise PlRustError("plrust.work_dir is not a valid path")
        return Path(self.work_dir)

    def tracing_level_name(self) -> str:
        """The tracing level name, ``INFO`` when unset."""
        if self.tracing_level is None:
            return "INFO"
        try:
            return _TRACING_LEVELS[self.tracing_level.strip().lower()]
        except KeyError:
            raise PlRustError("plrust.tracing_level was invalid") from None

    def compilation_targets(
        self, host_arch: str | None = None
    ) -> tuple[CompilationTarget, list[CrossCompilationTarget]]:
        """This host's target triple and the other configured architectures."""
        this_target = host_tuple(self.trusted)
        if self.compilation_targets_spec is None:
            return this_target, []
        host_arch = host_arch or _host_arch()
        others = [
            CrossCompilationTarget.from_name(name)
            for name in (part.strip() for part in self.compilation_targets_spec.split(","))
            if name != host_arch
        ]
        return this_target, others

    def linker_for_target(self, target: CrossCompilationTarget) -> str | None:
        """The ``plrust.<arch>_linker`` setting, if present."""
        return self.options.get(f"plrust.{target}_linker")

    def pgrx_bindings_for_target(self, target: CrossCompilationTarget) -> str | None:
        """The ``plrust.<arch>_pgrx_bindings_path`` setting, if present."""
        return self.options.get(f"plrust.{target}_pgrx_bindings_path")

    def trusted_pgrx_requirement(self) -> str:
        """The exact version requirement for the trusted pgrx crate."""
        if self.trusted_pgrx_version is None:
            raise PlRustError("unable to determine `plrust-trusted-pgrx` version")
        return f"={self.trusted_pgrx_version}"