"""Semantic versions and version requirements, as used by the allow-list."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from plrustkit.errors import MalformedVersion, UnsupportedVersionReq

_WILDCARDS = "*xX"
_U64_MAX = 2**64 - 1

_MAJOR = "major version number"
_MINOR = "minor version number"
_PATCH = "patch version number"
_PRE = "pre-release identifier"
_BUILD = "build metadata"

_DIGITS = re.compile(r"[0-9]*")
_IDENT = re.compile(r"[0-9A-Za-z.\-]*")


class _SemverError(ValueError):
    """A version or version requirement is not valid semver."""


class Op(Enum):
    """Comparison operator of a single comparator."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"

    @property
    def symbol(self) -> str:
        return "" if self is Op.WILDCARD else self.value


def _segment_key(segment: str, numeric_first: bool = True) -> tuple:
    if segment.isdigit():
        return (0, int(segment), len(segment), "")
    return (1, 0, 0, segment)


def _pre_key(pre: tuple[str, ...]) -> tuple:
    # An empty pre-release sorts after every non-empty one.
    if not pre:
        return (1,)
    return (0, tuple(_segment_key(s) for s in pre))


def _build_key(build: tuple[str, ...]) -> tuple:
    if not build:
        return (0,)
    return (1, tuple(_segment_key(s) for s in build))


def _numeric(text: str, pos: str) -> tuple[int, str]:
    digits = _DIGITS.match(text).group(0)
    if not digits:
        if text:
            raise _SemverError(f"unexpected character {text[0]!r} while parsing {pos}")
        raise _SemverError(f"unexpected end of input while parsing {pos}")
    if len(digits) > 1 and digits[0] == "0":
        raise _SemverError(f"invalid leading zero in {pos}")
    value = int(digits)
    if value > _U64_MAX:
        raise _SemverError(f"value of {pos} exceeds u64::MAX")
    return value, text[len(digits):]


def _dot(text: str, pos: str) -> str:
    if text.startswith("."):
        return text[1:]
    if text:
        raise _SemverError(f"unexpected character {text[0]!r} after {pos}")
    raise _SemverError(f"unexpected end of input while parsing {pos}")


def _identifier(text: str, pos: str) -> tuple[tuple[str, ...], str]:
    ident = _IDENT.match(text).group(0)
    segments = tuple(ident.split("."))
    for segment in segments:
        if not segment:
            raise _SemverError(f"empty identifier segment in {pos}")
        if pos == _PRE and segment.isdigit() and len(segment) > 1 and segment[0] == "0":
            raise _SemverError(f"invalid leading zero in {pos}")
    return segments, text[len(ident):]


def _starts_with_wildcard(text: str) -> bool:
    return bool(text) and text[0] in _WILDCARDS


@dataclass(frozen=True)
class Version:
    """A concrete semantic version."""

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse ``major.minor.patch[-pre][+build]``."""
        if not text:
            raise _SemverError("empty string, expected a semver version")
        major, rest = _numeric(text, _MAJOR)
        rest = _dot(rest, _MAJOR)
        minor, rest = _numeric(rest, _MINOR)
        rest = _dot(rest, _MINOR)
        patch, rest = _numeric(rest, _PATCH)
        pos = _PATCH
        pre: tuple[str, ...] = ()
        if rest.startswith("-"):
            pos = _PRE
            pre, rest = _identifier(rest[1:], _PRE)
        build: tuple[str, ...] = ()
        if rest.startswith("+"):
            pos = _BUILD
            build, rest = _identifier(rest[1:], _BUILD)
        if rest:
            raise _SemverError(f"unexpected character {rest[0]!r} after {pos}")
        return cls(major, minor, patch, pre, build)

    def _key(self) -> tuple:
        return (self.major, self.minor, self.patch, _pre_key(self.pre), _build_key(self.build))

    def __lt__(self, other: "Version") -> bool:
        return self._key() < other._key()

    def __le__(self, other: "Version") -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: "Version") -> bool:
        return self._key() > other._key()

    def __ge__(self, other: "Version") -> bool:
        return self._key() >= other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def _pre_lt(a: tuple[str, ...], b: tuple[str, ...]) -> bool:
    return _pre_key(a) < _pre_key(b)


@dataclass(frozen=True)
class Comparator:
    """One operator and a possibly partial version."""

    op: Op
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: tuple[str, ...] = ()

    def _matches_exact(self, ver: Version) -> bool:
        if ver.major != self.major:
            return False
        if self.minor is not None and ver.minor != self.minor:
            return False
        if self.patch is not None and ver.patch != self.patch:
            return False
        return ver.pre == self.pre

    def _matches_greater(self, ver: Version) -> bool:
        if ver.major != self.major:
            return ver.major > self.major
        if self.minor is None:
            return False
        if ver.minor != self.minor:
            return ver.minor > self.minor
        if self.patch is None:
            return False
        if ver.patch != self.patch:
            return ver.patch > self.patch
        return _pre_lt(self.pre, ver.pre)

    def _matches_less(self, ver: Version) -> bool:
        if ver.major != self.major:
            return ver.major < self.major
        if self.minor is None:
            return False
        if ver.minor != self.minor:
            return ver.minor < self.minor
        if self.patch is None:
            return False
        if ver.patch != self.patch:
            return ver.patch < self.patch
        return _pre_lt(ver.pre, self.pre)

    def _matches_tilde(self, ver: Version) -> bool:
        if ver.major != self.major:
            return False
        if self.minor is not None and ver.minor != self.minor:
            return False
        if self.patch is not None and ver.patch != self.patch:
            return ver.patch > self.patch
        return not _pre_lt(ver.pre, self.pre)

    def _matches_caret(self, ver: Version) -> bool:
        if ver.major != self.major:
            return False
        if self.minor is None:
            return True
        minor = self.minor
        if self.patch is None:
            if self.major > 0:
                return ver.minor >= minor
            return ver.minor == minor
        patch = self.patch
        if self.major > 0:
            if ver.minor != minor:
                return ver.minor > minor
            if ver.patch != patch:
                return ver.patch > patch
        elif minor > 0:
            if ver.minor != minor:
                return False
            if ver.patch != patch:
                return ver.patch > patch
        elif ver.minor != minor or ver.patch != patch:
            return False
        return not _pre_lt(ver.pre, self.pre)

    def _matches_impl(self, ver: Version) -> bool:
        if self.op in (Op.EXACT, Op.WILDCARD):
            return self._matches_exact(ver)
        if self.op is Op.GREATER:
            return self._matches_greater(ver)
        if self.op is Op.GREATER_EQ:
            return self._matches_exact(ver) or self._matches_greater(ver)
        if self.op is Op.LESS:
            return self._matches_less(ver)
        if self.op is Op.LESS_EQ:
            return self._matches_exact(ver) or self._matches_less(ver)
        if self.op is Op.TILDE:
            return self._matches_tilde(ver)
        return self._matches_caret(ver)

    def _pre_is_compatible(self, ver: Version) -> bool:
        return (
            self.major == ver.major
            and self.minor == ver.minor
            and self.patch == ver.patch
            and bool(self.pre)
        )

    def matches(self, version: Version) -> bool:
        """Whether ``version`` satisfies this single comparator."""
        return self._matches_impl(version) and (
            not version.pre or self._pre_is_compatible(version)
        )

    def __str__(self) -> str:
        text = f"{self.op.symbol}{self.major}"
        if self.minor is not None:
            text += f".{self.minor}"
            if self.patch is not None:
                text += f".{self.patch}"
                if self.pre:
                    text += "-" + ".".join(self.pre)
            elif self.op is Op.WILDCARD:
                text += ".*"
        elif self.op is Op.WILDCARD:
            text += ".*"
        return text


def _parse_op(text: str) -> tuple[Op | None, str]:
    for prefix, op in (
        ("=", Op.EXACT),
        (">=", Op.GREATER_EQ),
        (">", Op.GREATER),
        ("<=", Op.LESS_EQ),
        ("<", Op.LESS),
        ("~", Op.TILDE),
        ("^", Op.CARET),
    ):
        if text.startswith(prefix):
            return op, text[len(prefix):]
    return None, text


def _parse_comparator(text: str) -> tuple[Comparator, str, str]:
    parsed_op, rest = _parse_op(text)
    default_op = parsed_op is None
    op = Op.CARET if parsed_op is None else parsed_op
    rest = rest.lstrip(" ")

    pos = _MAJOR
    major, rest = _numeric(rest, pos)
    has_wildcard = False

    minor = None
    if rest.startswith("."):
        rest = rest[1:]
        pos = _MINOR
        if _starts_with_wildcard(rest):
            has_wildcard = True
            if default_op:
                op = Op.WILDCARD
            rest = rest[1:]
        else:
            minor, rest = _numeric(rest, pos)

    patch = None
    if rest.startswith("."):
        rest = rest[1:]
        pos = _PATCH
        if _starts_with_wildcard(rest):
            if default_op:
                op = Op.WILDCARD
            has_wildcard = True
            rest = rest[1:]
        elif has_wildcard:
            raise _SemverError("unexpected character after wildcard in version req")
        else:
            patch, rest = _numeric(rest, pos)

    pre: tuple[str, ...] = ()
    if patch is not None and rest.startswith("-"):
        pos = _PRE
        pre, rest = _identifier(rest[1:], _PRE)
    if patch is not None and rest.startswith("+"):
        pos = _BUILD
        _, rest = _identifier(rest[1:], _BUILD)

    rest = rest.lstrip(" ")
    return Comparator(op, major, minor, patch, pre), pos, rest


@dataclass(frozen=True)
class VersionReq:
    """A comma-separated list of comparators; empty means ``*``."""

    comparators: tuple[Comparator, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, text: str) -> "VersionReq":
        """Parse a version requirement such as ``>=1.0, <2`` or ``*``."""
        text = text.lstrip(" ")
        if _starts_with_wildcard(text):
            ch = text[0]
            rest = text[1:].lstrip(" ")
            if not rest:
                return cls(())
            if rest.startswith(","):
                raise _SemverError(
                    f"wildcard req ({ch}) must be the only comparator in the version req"
                )
            raise _SemverError("unexpected character after wildcard in version req")

        comparators: list[Comparator] = []
        while True:
            try:
                comparator, pos, rest = _parse_comparator(text)
            except _SemverError:
                if _starts_with_wildcard(text):
                    after = text[1:].lstrip(" ")
                    if not after or after.startswith(","):
                        raise _SemverError(
                            f"wildcard req ({text[0]}) must be the only comparator "
                            "in the version req"
                        ) from None
                raise
            comparators.append(comparator)
            if not rest:
                break
            if not rest.startswith(","):
                raise _SemverError(f"expected comma after {pos}, found {rest[0]!r}")
            text = rest[1:].lstrip(" ")
        return cls(tuple(comparators))

    def matches(self, version: Version) -> bool:
        """Whether ``version`` satisfies every comparator."""
        if not all(cmp._matches_impl(version) for cmp in self.comparators):
            return False
        if not version.pre:
            return True
        return any(cmp._pre_is_compatible(version) for cmp in self.comparators)

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(cmp) for cmp in self.comparators)


def fake_version(comparator: Comparator) -> Version:
    """Turn a comparator into the closest concrete version it admits."""
    major = comparator.major
    minor = comparator.minor if comparator.minor is not None else 0
    patch = comparator.patch if comparator.patch is not None else 0
    if comparator.op is Op.GREATER:
        patch += 1
    elif comparator.op is Op.LESS:
        if patch > 0:
            patch -= 1
        elif minor > 0:
            minor -= 1
        elif major > 0:
            major -= 1
    return Version(major, minor, patch, comparator.pre)


def validate_versionreq(vreq: VersionReq, require_exact: bool) -> bool:
    """Accept only ``*``, single (exact when required) or lower/upper bounded requirements."""
    comparators = vreq.comparators
    if any(cmp.pre for cmp in comparators):
        return False
    if not comparators:
        return True
    if len(comparators) == 1:
        return comparators[0].op is Op.EXACT if require_exact else True
    return (
        len(comparators) == 2
        and comparators[0].op in (Op.GREATER, Op.GREATER_EQ)
        and comparators[1].op in (Op.LESS, Op.LESS_EQ)
    )


def _cmp(a: Version, b: Version) -> int:
    return (a > b) - (a < b)


@dataclass(frozen=True)
class OrderedVersionReq:
    """A validated allow-list version requirement with an ordering.

    ``*`` sorts first; otherwise requirements are ordered by their lower
    bound and then by their upper bound.
    """

    req: VersionReq

    @classmethod
    def parse(cls, text: str) -> "OrderedVersionReq":
        """Parse and validate; only ``*``, ``=x.y.z`` and bounded ranges are accepted."""
        try:
            vreq = VersionReq.parse(text)
        except ValueError as err:
            raise MalformedVersion(text, str(err)) from None
        if validate_versionreq(vreq, True):
            return cls(vreq)
        raise UnsupportedVersionReq(text)

    @property
    def comparators(self) -> tuple[Comparator, ...]:
        return self.req.comparators

    def matches(self, version: Version) -> bool:
        """Whether a concrete version satisfies this requirement."""
        return self.req.matches(version)

    def matches_versionreq(self, other: VersionReq) -> bool:
        """Whether the bounds of ``other`` fall within this requirement."""
        if not validate_versionreq(other, False):
            return False
        if not other.comparators:
            return True
        other_lower = other.comparators[0]
        if len(other.comparators) == 1:
            return self.req.matches(fake_version(other_lower))
        other_upper = other.comparators[1]
        mine = self.req.comparators
        if not mine:
            return True
        my_lower = mine[0]
        if len(mine) > 1:
            my_upper = mine[1]
            return my_lower.matches(fake_version(other_lower)) and my_upper.matches(
                fake_version(other_upper)
            )
        return my_lower.matches(fake_version(other_lower)) and my_lower.matches(
            fake_version(other_upper)
        )

    def as_versions(self) -> list[Version]:
        """Each comparator as a concrete version, unknown parts taken as zero."""
        return [fake_version(cmp) for cmp in self.req.comparators]

    def _compare(self, other: "OrderedVersionReq") -> int:
        mine = self.as_versions()
        theirs = other.as_versions()
        if not mine:
            return -1
        if not theirs:
            return 1
        first = _cmp(mine[0], theirs[0])
        if first == 0 and len(mine) > 1 and len(theirs) > 1:
            return _cmp(mine[1], theirs[1])
        if first == 0 and len(theirs) > 1:
            return _cmp(mine[0], theirs[1])
        return first

    def __lt__(self, other: "OrderedVersionReq") -> bool:
        return self._compare(other) < 0

    def __le__(self, other: "OrderedVersionReq") -> bool:
        return self._compare(other) <= 0

    def __gt__(self, other: "OrderedVersionReq") -> bool:
        return self._compare(other) > 0

    def __ge__(self, other: "OrderedVersionReq") -> bool:
        return self._compare(other) >= 0

    def __str__(self) -> str:
        return str(self.req)