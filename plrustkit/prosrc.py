"""Managing the stored ``prosrc`` entry of a function.

Once a function has been compiled, its catalog source holds a JSON document
with the user's source code and the compiled shared library for each
compilation target.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import zlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from plrustkit.errors import FunctionNotCompiledForTarget
from plrustkit.naming import symbol_name
from plrustkit.target import CompilationTarget


class Encoding(Enum):
    """How a shared library is encoded inside the entry."""

    GZ_BASE64 = "GzBase64"


def _b64_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64_decode(text: str) -> bytes:
    if "=" in text:
        raise ValueError("padding is not allowed in encoded library")
    if len(text) % 4 == 1:
        raise ValueError("invalid length of encoded library")
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as err:
        raise ValueError(f"invalid base64: {err}") from None


def _string_list(value: Any, name: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"`{name}` must be a list of strings")
    return tuple(value)


@dataclass
class SharedLibrary:
    """A compiled shared library, compressed and text-encoded."""

    encoded: str
    symbol: str | None = None
    lints: tuple[str, ...] = ()
    encoding: Encoding = Encoding.GZ_BASE64

    @classmethod
    def encode(cls, symbol: str, so_bytes: bytes, lints) -> "SharedLibrary":
        """Compress and encode ``so_bytes`` for storage."""
        compressed = gzip.compress(bytes(so_bytes), compresslevel=9, mtime=0)
        return cls(
            encoded=_b64_encode(compressed),
            symbol=symbol,
            lints=tuple(lints),
            encoding=Encoding.GZ_BASE64,
        )

    def decode(self) -> bytes:
        """The original shared library bytes."""
        compressed = _b64_decode(self.encoded)
        try:
            return gzip.decompress(compressed)
        except (OSError, EOFError, zlib.error) as err:
            raise ValueError(f"invalid compressed library: {err}") from None

    def to_dict(self) -> dict[str, Any]:
        return {
            "encoding": self.encoding.value,
            "symbol": self.symbol,
            "encoded": self.encoded,
            "lints": list(self.lints),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SharedLibrary":
        if not isinstance(data, dict):
            raise ValueError("shared library entry must be an object")
        for key in ("encoding", "encoded", "lints"):
            if key not in data:
                raise ValueError(f"missing field `{key}`")
        try:
            encoding = Encoding(data["encoding"])
        except (ValueError, TypeError):
            raise ValueError(f"unknown encoding `{data['encoding']}`") from None
        symbol = data.get("symbol")
        if symbol is not None and not isinstance(symbol, str):
            raise ValueError("`symbol` must be a string or null")
        if not isinstance(data["encoded"], str):
            raise ValueError("`encoded` must be a string")
        return cls(
            encoded=data["encoded"],
            symbol=symbol,
            lints=_string_list(data["lints"], "lints"),
            encoding=encoding,
        )


@dataclass
class CompiledSharedLibrary:
    """Decoded library bytes together with the stored metadata."""

    data: bytes
    metadata: SharedLibrary


@dataclass
class ProSrcEntry:
    """The JSON document stored as a compiled function's source."""

    src: str
    trusted_pgrx_version: str
    lib: dict[CompilationTarget, SharedLibrary] = field(default_factory=dict)
    capabilities: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, text: str) -> "ProSrcEntry":
        """Parse an entry; raise ``ValueError`` if ``text`` is not one."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("entry must be a JSON object")
        if "src" not in data or not isinstance(data["src"], str):
            raise ValueError("missing or invalid field `src`")
        version_keys = [k for k in ("trusted_pgrx_version", "trusted_pgx_version") if k in data]
        if not version_keys:
            raise ValueError("missing field `trusted_pgrx_version`")
        if len(version_keys) > 1:
            raise ValueError("duplicate field `trusted_pgrx_version`")
        version = data[version_keys[0]]
        if not isinstance(version, str):
            raise ValueError("`trusted_pgrx_version` must be a string")
        if "lib" not in data or not isinstance(data["lib"], dict):
            raise ValueError("missing or invalid field `lib`")
        lib = {
            CompilationTarget(target): SharedLibrary.from_dict(value)
            for target, value in data["lib"].items()
        }
        capabilities = (
            _string_list(data["capabilities"], "capabilities")
            if "capabilities" in data
            else ()
        )
        return cls(
            src=data["src"],
            trusted_pgrx_version=version,
            lib=lib,
            capabilities=capabilities,
        )

    def to_json(self) -> str:
        """Serialize compactly, libraries ordered by target."""
        document = {
            "src": self.src,
            "trusted_pgrx_version": self.trusted_pgrx_version,
            "lib": {str(t): self.lib[t].to_dict() for t in sorted(self.lib)},
            "capabilities": list(self.capabilities),
        }
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False)

    def take_shared_library(self, target: str) -> CompiledSharedLibrary:
        """Remove and decode the library compiled for ``target``."""
        key = CompilationTarget(target)
        try:
            library = self.lib.pop(key)
        except KeyError:
            raise FunctionNotCompiledForTarget(key) from None
        return CompiledSharedLibrary(data=library.decode(), metadata=library)


def extract_source_and_capabilities(code: str) -> tuple[str, tuple[str, ...]]:
    """The user source and capabilities held in ``code``.

    If ``code`` is not a stored entry it is taken to be raw source code.
    """
    try:
        entry = ProSrcEntry.from_json(code)
    except ValueError:
        return code, ()
    return entry.src, entry.capabilities


def update_entry(
    prosrc: str,
    db_oid: int,
    fn_oid: int,
    target: str,
    so_bytes: bytes,
    lints,
    trusted_pgrx_version: str,
) -> str:
    """The new stored source with ``so_bytes`` recorded for ``target``.

    Any library already stored for that target is replaced.
    """
    try:
        entry = ProSrcEntry.from_json(prosrc)
    except ValueError:
        entry = ProSrcEntry(src=prosrc, trusted_pgrx_version=trusted_pgrx_version)
    entry.lib[CompilationTarget(target)] = SharedLibrary.encode(
        symbol_name(db_oid, fn_oid), so_bytes, lints
    )
    return entry.to_json()