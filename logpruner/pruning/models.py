"""Typed records passed between the pruning components."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List


class AlarmState(str, Enum):
    """Closed set of alarm states; anything unrecognised is ``UNKNOWN``."""

    OK = "OK"
    ALARM = "ALARM"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str) -> "AlarmState":
        for member in (cls.OK, cls.ALARM, cls.INSUFFICIENT_DATA):
            if raw == member.value:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class RetentionConfig:
    """Retention settings for a single index, keyed by ``index``."""

    index: str
    alarm_name: str
    host: str
    port: int
    older_than_days: int
    use_tls: bool = False
    tls_validate: bool = False
    prefix: str | None = None


@dataclass(frozen=True, slots=True)
class AlarmRecord:
    name: str
    arn: str
    state_value: str
    state_reason: str | None = None

    @property
    def state(self) -> AlarmState:
        return AlarmState.parse(self.state_value)


@dataclass(frozen=True, slots=True)
class AlarmDescription:
    """Parsed ``describe-alarms`` response holding at least one record."""

    alarms: List[AlarmRecord]

    @property
    def primary(self) -> AlarmRecord:
        return self.alarms[0]


@dataclass(slots=True)
class ExecutionResult:
    """Outcome of processing one index during a run."""

    index: str
    alarm_state: str | None = None
    action_taken: bool = False
    error: Exception | None = None
    stage: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = ["AlarmState", "RetentionConfig", "AlarmRecord", "AlarmDescription", "ExecutionResult"]
