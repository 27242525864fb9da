"""Error codes of the controller and a small log of recent errors."""

from __future__ import annotations

import enum
from collections import deque

ERROR_BUF_SIZE = 4


class ErrorSeverity(enum.Enum):
    """What an error does to the running system."""

    STOP = "stop"
    DISPLAY = "display"
    DERATE = "derate"


class ErrorCode(enum.IntEnum):
    """Errors the controller can report."""

    BMSCOMM = 1
    OVERVOLTAGE = 2
    PRECHARGE = 3
    THROTTLE1 = 4
    THROTTLE2 = 5
    THROTTLE12 = 6
    THROTTLE12DIFF = 7
    THROTTLEMODE = 8
    CANTIMEOUT = 9
    TMPHSMAX = 10
    TMPMMAX = 11

    @property
    def severity(self) -> ErrorSeverity:
        return _SEVERITY[self]


_SEVERITY = {
    ErrorCode.BMSCOMM: ErrorSeverity.STOP,
    ErrorCode.OVERVOLTAGE: ErrorSeverity.STOP,
    ErrorCode.PRECHARGE: ErrorSeverity.STOP,
    ErrorCode.THROTTLE1: ErrorSeverity.DISPLAY,
    ErrorCode.THROTTLE2: ErrorSeverity.DISPLAY,
    ErrorCode.THROTTLE12: ErrorSeverity.DISPLAY,
    ErrorCode.THROTTLE12DIFF: ErrorSeverity.DISPLAY,
    ErrorCode.THROTTLEMODE: ErrorSeverity.DISPLAY,
    ErrorCode.CANTIMEOUT: ErrorSeverity.DISPLAY,
    ErrorCode.TMPHSMAX: ErrorSeverity.DERATE,
    ErrorCode.TMPMMAX: ErrorSeverity.DERATE,
}


class ErrorLog:
    """Keeps the most recent errors in a fixed-size ring buffer."""

    def __init__(self, size: int = ERROR_BUF_SIZE) -> None:
        if size < 1:
            raise ValueError("error log size must be at least 1")
        self._entries: deque[ErrorCode] = deque(maxlen=size)

    def post(self, code: ErrorCode) -> None:
        """Record an error, dropping the oldest one when full."""
        self._entries.append(ErrorCode(code))

    def last(self) -> ErrorCode | None:
        """Return the most recently posted error, if any."""
        return self._entries[-1] if self._entries else None

    def entries(self) -> list[ErrorCode]:
        """Return the stored errors, oldest first."""
        return list(self._entries)

    def format_all(self) -> str:
        """Return a printable listing of the stored errors."""
        if not self._entries:
            return "No errors\r\n"
        return "".join(
            f"{code.name} ({code.severity.value})\r\n" for code in self._entries
        )

    def __len__(self) -> int:
        return len(self._entries)