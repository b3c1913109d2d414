"""File-like writers that forward what is written to them to the server log."""

from __future__ import annotations

import logging

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

_LOGGER_NAME = "plrustkit"


def _decode(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    return bytes(data).decode("utf-8")


class GuestWriter:
    """Logs output of a guest process, prefixed with ``stdout: `` or ``stderr: ``."""

    level = logging.INFO

    def __init__(self, is_stderr: bool = False, logger: logging.Logger | None = None) -> None:
        self.is_stderr = is_stderr
        self.logger = logger or logging.getLogger(_LOGGER_NAME)

    def write(self, data: bytes | str) -> int:
        """Log ``data`` as one message and report all of it as written."""
        content = _decode(data)
        prefix = "stderr: " if self.is_stderr else "stdout: "
        self.logger.log(self.level, "%s", prefix + content)
        return len(data)

    def flush(self) -> None:
        """Nothing is buffered."""


class LogWriter:
    """Logs each write as one message, leading whitespace trimmed unless ``trim`` is off."""

    level = logging.INFO

    def __init__(self, trim: bool = True, logger: logging.Logger | None = None) -> None:
        self.trim = trim
        self.logger = logger or logging.getLogger(_LOGGER_NAME)

    def write(self, data: bytes | str) -> int:
        """Log ``data`` as one message and report all of it as written."""
        content = _decode(data)
        if self.trim:
            content = content.lstrip()
        self.logger.log(self.level, "%s", content)
        return len(data)

    def flush(self) -> None:
        """Nothing is buffered."""


class NoticeWriter(LogWriter):
    """Like :class:`LogWriter`, at notice level."""

    level = NOTICE


class WarningWriter(LogWriter):
    """Like :class:`LogWriter`, at warning level."""

    level = logging.WARNING