"""Checks applied to ALTER FUNCTION statements."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from plrustkit.errors import AlterStrictError


def _action_name(action: Any) -> str:
    if isinstance(action, str):
        return action
    return str(getattr(action, "defname"))


def check_alter_function(
    actions: Iterable[Any],
    function_language: int | None,
    plrust_language: int | None,
) -> bool:
    """Refuse any change to the STRICT property of a plrust function.

    ``actions`` are the option names of the statement (or objects with a
    ``defname``).  Returns whether the function is a plrust function and so
    was checked; raises :class:`AlterStrictError` for a STRICT change, even
    one to the current value.
    """
    if not plrust_language or function_language != plrust_language:
        return False
    for action in actions:
        if "strict" in _action_name(action).lower():
            raise AlterStrictError()
    return True