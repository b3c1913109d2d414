"""Names given to generated user-function symbols and crates."""

from __future__ import annotations


def symbol_name(db_oid: int, fn_oid: int) -> str:
    """The exported symbol name of a user function, tied to its database and oid."""
    return f"plrust_fn_oid_{db_oid}_{fn_oid}"


def crate_name(db_oid: int, fn_oid: int, generation_number: int) -> str:
    """A crate name unique to this generation of the function."""
    return f"{symbol_name(db_oid, fn_oid)}_{generation_number}"