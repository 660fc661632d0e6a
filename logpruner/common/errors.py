"""Exception hierarchy shared by logpruner components."""
from __future__ import annotations

from typing import Sequence


class PrunerError(Exception):
    """Base class for every error raised by logpruner."""


class ConfigurationError(PrunerError):
    """Invalid configuration or a missing precondition; aborts the whole run."""


class ExternalToolError(PrunerError):
    """An external command failed, exited non-zero or wrote to stderr."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
        diagnostic: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        text = super().__str__()
        if self.diagnostic:
            return f"{text}: {self.diagnostic.strip()}"
        return text


class CommandTimeoutError(ExternalToolError, TimeoutError):
    """An external command did not finish within its timeout."""


class MalformedResponseError(PrunerError):
    """The alarm service response could not be parsed."""


class NoAlarmDataError(PrunerError):
    """The alarm service response contained no alarm records."""


class UnknownAlarmStateError(PrunerError):
    """The alarm reported a state that does not map to a prune decision."""

    def __init__(self, observed: str) -> None:
        super().__init__(f"Unknown alarm state {observed!r}; refusing to decide")
        self.observed = observed


__all__ = [
    "PrunerError",
    "ConfigurationError",
    "ExternalToolError",
    "CommandTimeoutError",
    "MalformedResponseError",
    "NoAlarmDataError",
    "UnknownAlarmStateError",
]
