"""The dependency allow-list: which crates, and which versions, user functions may use."""

from __future__ import annotations

import copy
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key
from pathlib import Path
from typing import Any

from plrustkit.errors import (
    CannotReadAllowList,
    InvalidPath,
    MalformedVersion,
    NotATomlFile,
    NotConfigured,
    UnsupportedValueType,
    VersionMissing,
    VersionNotPermitted,
)
from plrustkit.settings import Settings
from plrustkit.versions import OrderedVersionReq, Version, VersionReq, fake_version

_Entry = tuple[OrderedVersionReq, dict[str, Any]]


def _check_table_options(table: Mapping[str, Any]) -> None:
    """``features`` must be a list of strings and ``default-features`` a boolean."""
    if "features" in table:
        features = table["features"]
        if not isinstance(features, list):
            raise UnsupportedValueType(features)
        for value in features:
            if not isinstance(value, str):
                raise UnsupportedValueType(value)
    if "default-features" in table:
        default_features = table["default-features"]
        if not isinstance(default_features, bool):
            raise UnsupportedValueType(default_features)


def _string_entry(text: str) -> _Entry:
    version = OrderedVersionReq.parse(text)
    return version, {"version": str(version)}


def _table_entry(table: Mapping[str, Any]) -> _Entry:
    _check_table_options(table)
    if "version" not in table:
        raise VersionMissing()
    version = table["version"]
    if not isinstance(version, str):
        raise UnsupportedValueType(version)
    return OrderedVersionReq.parse(version), dict(table)


def _compare_entries(a: _Entry, b: _Entry) -> int:
    if a[0] < b[0]:
        return -1
    if a[0] > b[0]:
        return 1
    return 0


def _ordered(entries: Iterable[_Entry]) -> dict[OrderedVersionReq, dict[str, Any]]:
    """Sort entries by requirement; of equal neighbouring requirements the last wins."""
    ranked = sorted(entries, key=cmp_to_key(_compare_entries))
    kept: list[_Entry] = []
    for entry in ranked:
        if kept and kept[-1][0] == entry[0]:
            kept[-1] = entry
        else:
            kept.append(entry)
    return dict(kept)


@dataclass
class Dependency:
    """A crate on the allow-list with every version entry declared for it, smallest first."""

    name: str
    versions: dict[OrderedVersionReq, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_toml(cls, name: str, value: Any) -> "Dependency":
        """Build from a TOML value: a version string, a table, or a list of either."""
        if isinstance(value, str):
            return cls(name, _ordered([_string_entry(value)]))
        if isinstance(value, dict):
            return cls(name, _ordered([_table_entry(value)]))
        if isinstance(value, list):
            entries: list[_Entry] = []
            for item in value:
                if isinstance(item, str):
                    entries.append(_string_entry(item))
                elif isinstance(item, dict):
                    entries.append(_table_entry(item))
                else:
                    raise UnsupportedValueType(item)
            return cls(name, _ordered(entries))
        raise UnsupportedValueType(value)

    def get_dependency_entry(self, wanted_version: str) -> dict[str, Any]:
        """The dependency table for the largest allowed entry matching ``wanted_version``.

        A literal version that matches is returned as an exact ``=x.y.z``
        requirement.  A requirement that matches a wildcard entry is returned
        as given; otherwise the matching allow-list entry is returned as is.
        """
        wanted = wanted_version.strip().lstrip("=")
        ranked = list(reversed(self.versions.items()))

        try:
            literal: Version | None = Version.parse(wanted)
        except ValueError:
            literal = None

        if literal is not None:
            for version, table in ranked:
                if version.matches(literal):
                    entry = copy.deepcopy(table)
                    entry["version"] = f"={literal}"
                    return entry
        else:
            try:
                requirement = VersionReq.parse(wanted)
            except ValueError as err:
                raise MalformedVersion(wanted, str(err)) from None
            for version, table in ranked:
                if version.matches_versionreq(requirement) or (
                    version.comparators
                    and requirement.matches(fake_version(version.comparators[0]))
                ):
                    entry = copy.deepcopy(table)
                    if "*" in str(version):
                        entry["version"] = str(requirement)
                    return entry

        raise VersionNotPermitted(wanted)


AllowList = dict[str, Dependency]


def parse_allowlist(contents: str) -> AllowList:
    """Parse allow-list TOML into dependencies keyed by crate name, in name order."""
    try:
        document = tomllib.loads(contents)
    except tomllib.TOMLDecodeError:
        raise NotATomlFile() from None
    allowed = {name: Dependency.from_toml(name, value) for name, value in document.items()}
    return dict(sorted(allowed.items()))


def load_allowlist(settings: Settings) -> AllowList:
    """Read the allow-list file named by ``plrust.allowed_dependencies``."""
    if settings.allowed_dependencies is None:
        raise NotConfigured()
    if "\0" in settings.allowed_dependencies:
        raise InvalidPath()
    path = Path(settings.allowed_dependencies)
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        raise CannotReadAllowList() from None
    return parse_allowlist(contents)


@dataclass(frozen=True)
class AllowedDependency:
    """One row of the allowed-dependencies listing."""

    name: str
    version: str
    features: tuple[str, ...]
    default_features: bool


def allowed_dependencies(allowlist: Mapping[str, Dependency]) -> list[AllowedDependency]:
    """One row for every version entry of every dependency, by name then version."""
    rows: list[AllowedDependency] = []
    for _, dependency in sorted(allowlist.items()):
        for table in dependency.versions.values():
            rows.append(
                AllowedDependency(
                    name=dependency.name,
                    version=str(table["version"]).replace('"', ""),
                    features=tuple(table.get("features", ())),
                    default_features=table.get("default-features", True),
                )
            )
    return rows