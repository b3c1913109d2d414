"""Exception hierarchy for PL/Rust function management."""

from __future__ import annotations

from typing import Any


class PlRustError(Exception):
    """Base class of every error raised by this package.

    Two errors compare equal when they are of the same type and carry the
    same values.
    """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlRustError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash((type(self), repr(self.args)))


class AllowListError(PlRustError):
    """Problems with the dependency allow-list or with version requirements."""


class UnsupportedValueType(AllowListError):
    """A value in the allow-list has a type that is not supported there."""

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"Unsupported value type: {self.value!r}"


class VersionMissing(AllowListError):
    """A table entry in the allow-list has no ``version`` key."""

    def __str__(self) -> str:
        return "Dependency entry is missing the `version` attribute"


class CannotReadAllowList(AllowListError):
    """The allow-list file could not be read."""

    def __str__(self) -> str:
        return "Cannot read allow-list dependency file"


class NotATomlFile(AllowListError):
    """The allow-list file is not valid TOML."""

    def __str__(self) -> str:
        return "Not a TOML file"


class NotConfigured(AllowListError):
    """The ``plrust.allowed_dependencies`` setting is missing."""

    def __str__(self) -> str:
        return "`plrust.allowed_dependencies` is not set in `postgresql.conf`"


class InvalidPath(AllowListError):
    """The ``plrust.allowed_dependencies`` setting is not a usable path."""

    def __str__(self) -> str:
        return "The value of `plrust.allowed_dependencies` is not a valid path"


class MalformedVersion(AllowListError):
    """A version or version requirement could not be parsed."""

    def __init__(self, version: str, reason: str) -> None:
        super().__init__(version, reason)
        self.version = version
        self.reason = reason

    def __str__(self) -> str:
        return f"`{self.version}` is malformed: {self.reason}"


class VersionNotPermitted(AllowListError):
    """A requested version matches nothing in the allow-list."""

    def __init__(self, version: str) -> None:
        super().__init__(version)
        self.version = version

    def __str__(self) -> str:
        return f"`{self.version}` is not permitted by the allow-list"


class UnsupportedVersionReq(AllowListError):
    """A version requirement is of a shape the allow-list does not accept."""

    def __init__(self, version: str) -> None:
        super().__init__(version)
        self.version = version

    def __str__(self) -> str:
        return (
            f"`{self.version}` is not a supported version requirement.  "
            "Use wildcard (`*`), exact (`=x.y.z`), or bounded ranges (`>=a.b.c, <=x.y.z`)"
        )


class TargetError(PlRustError):
    """Problems with compilation targets."""


class UnsupportedTarget(TargetError):
    """A target name is not one of the supported architectures."""

    def __str__(self) -> str:
        return "unsupported target tuple"


class FunctionNotCompiledForTarget(PlRustError):
    """A stored function has no compiled library for the requested target."""

    def __init__(self, target: Any) -> None:
        super().__init__(target)
        self.target = target

    def __str__(self) -> str:
        return f"Function was not compiled for this host (`{self.target}`)"


class NoSuchFunction(PlRustError):
    """No catalog entry exists for a function oid."""

    def __init__(self, oid: int) -> None:
        super().__init__(oid)
        self.oid = oid

    def __str__(self) -> str:
        return f"Function `{self.oid}` does not exist"


class InvalidArgumentName(PlRustError):
    """A function argument is unnamed or its name is not a valid identifier."""

    detail = (
        "PL/Rust argument names must also be valid Rust identifiers.  "
        "Rust's identifier specification can be found at "
        "https://doc.rust-lang.org/reference/identifiers.html"
    )

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        if not self.name:
            return "PL/Rust does not support unnamed arguments"
        return (
            f"`{self.name}` is an invalid Rust identifier and cannot be used "
            "as an argument name"
        )


class AlterStrictError(PlRustError):
    """An ALTER FUNCTION tried to change the STRICT property of a function."""

    hint = (
        "Use 'CREATE OR REPLACE FUNCTION' to alter the STRICT-ness of an "
        "existing plrust function"
    )

    def __str__(self) -> str:
        return "plrust functions cannot have their STRICT property altered"