"""Function catalog entries (``pg_catalog.pg_proc`` rows) and their interpretation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from plrustkit.errors import InvalidArgumentName

_U32_MASK = 0xFFFF_FFFF

_RUST_KEYWORDS = frozenset(
    {
        "as", "break", "const", "continue", "crate", "else", "enum", "extern",
        "false", "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod",
        "move", "mut", "pub", "ref", "return", "self", "Self", "static", "struct",
        "super", "trait", "true", "type", "unsafe", "use", "where", "while",
        "async", "await", "dyn", "abstract", "become", "box", "do", "final",
        "macro", "override", "priv", "typeof", "unsized", "virtual", "yield",
        "try", "_",
    }
)

# Keywords that cannot be written as raw identifiers either.
_NOT_RAW = frozenset({"crate", "self", "Self", "super", "_"})


class ProArgMode(Enum):
    """Mode of a function argument, as encoded in ``proargmodes``."""

    IN = "i"
    OUT = "o"
    INOUT = "b"
    VARIADIC = "v"
    TABLE = "t"

    @classmethod
    def from_code(cls, code: str | int) -> "ProArgMode":
        """Decode a one-character mode, given as a character or its byte value."""
        char = chr(code & 0xFF) if isinstance(code, int) else code
        try:
            return cls(char)
        except ValueError:
            raise ValueError(f"unrecognized `ProArgMode`: `{code}`") from None


def _is_rust_identifier(name: str) -> bool:
    if name.startswith("r#"):
        bare = name[2:]
        return bare.isidentifier() and bare not in _NOT_RAW
    return name.isidentifier() and name not in _RUST_KEYWORDS


def validate_argument_name(name: str | None) -> str:
    """Return ``name`` if it can be used as an argument name, else raise."""
    name = name or ""
    if not _is_rust_identifier(name):
        raise InvalidArgumentName(name)
    return name


@dataclass
class ProcEntry:
    """A snapshot of one function's catalog row."""

    oid: int
    prolang: int
    prosrc: str
    pronargs: int = 0
    proargnames: list[str | None] | None = None
    proargmodes: str | list[str | int] | None = None
    proargtypes: list[int] = field(default_factory=list)
    proallargtypes: list[int] | None = None
    prorettype: int = 0
    proisstrict: bool = False
    proretset: bool = False
    xmin: int = 0
    cmin: int = 0

    def generation_number(self) -> int:
        """The inserting transaction id and command id packed into one number."""
        return ((self.xmin & _U32_MASK) << 32) | (self.cmin & _U32_MASK)

    def argnames(self) -> list[str]:
        """Every argument name, each checked to be a valid identifier."""
        names = (
            self.proargnames
            if self.proargnames is not None
            else [None] * self.pronargs
        )
        return [validate_argument_name(name) for name in names]

    def argmodes(self) -> list[ProArgMode]:
        """The mode of each argument; all ``IN`` when the catalog stores none."""
        if self.proargmodes is None:
            return [ProArgMode.IN] * len(self.argnames())
        return [ProArgMode.from_code(code) for code in self.proargmodes]

    def allargtypes(self) -> list[int]:
        """Types of all arguments, falling back to the input argument types."""
        if self.proallargtypes is not None:
            return list(self.proallargtypes)
        return list(self.proargtypes)