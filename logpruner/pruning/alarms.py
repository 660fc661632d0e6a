"""CloudWatch alarm queries run through the maintenance container."""
from __future__ import annotations

import json
from typing import Any, List, Mapping

from logpruner.common.errors import MalformedResponseError, NoAlarmDataError
from logpruner.common.logger import logger
from logpruner.pruning.commands import container_command, container_name, describe_alarm_command
from logpruner.pruning.executor import QUERY_TIMEOUT_S, MaintenanceExecutor
from logpruner.pruning.models import AlarmDescription, AlarmRecord


class AlarmStateClient:
    """Looks up the current state of a single named alarm."""

    def __init__(
        self,
        executor: MaintenanceExecutor,
        env: Mapping[str, str],
        image: str,
        timeout: float = QUERY_TIMEOUT_S,
    ) -> None:
        self._executor = executor
        self._env = dict(env)
        self._image = image
        self._timeout = timeout

    def query(self, alarm_name: str) -> AlarmDescription:
        """Return the parsed description of ``alarm_name``.

        Raises ``ExternalToolError`` when the query fails, ``MalformedResponseError``
        when the output cannot be parsed and ``NoAlarmDataError`` when no alarm
        matched the name.
        """

        if not alarm_name or not alarm_name.strip():
            raise ValueError("alarm_name must be a non-empty string")
        name = container_name()
        command = container_command(describe_alarm_command(alarm_name), self._image, name)
        output = self._executor.run(command, self._env, self._timeout, container_name=name)
        logger.debug("describe-alarms output for {}: {}", alarm_name, output)
        return parse_alarm_description(output)


def parse_alarm_description(document: str) -> AlarmDescription:
    """Parse ``describe-alarms`` JSON output, ignoring fields that are not needed."""

    try:
        payload = json.loads(document)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"describe-alarms output is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedResponseError("describe-alarms output must be a JSON object")
    raw_alarms = payload.get("MetricAlarms")
    if not isinstance(raw_alarms, list):
        raise MalformedResponseError("describe-alarms output has no 'MetricAlarms' list")
    if not raw_alarms:
        raise NoAlarmDataError("describe-alarms returned no alarm records")
    return AlarmDescription(alarms=[_parse_record(position, raw) for position, raw in enumerate(raw_alarms)])


def _parse_record(position: int, raw: Any) -> AlarmRecord:
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"Alarm record {position} is not an object")
    state_value = raw.get("StateValue")
    if not isinstance(state_value, str):
        raise MalformedResponseError(f"Alarm record {position} has no 'StateValue'")
    name = raw.get("AlarmName")
    arn = raw.get("AlarmArn")
    identifiers: List[Any] = [value for value in (name, arn) if isinstance(value, str)]
    if not identifiers:
        raise MalformedResponseError(f"Alarm record {position} has neither 'AlarmName' nor 'AlarmArn'")
    reason = raw.get("StateReason")
    return AlarmRecord(
        name=name if isinstance(name, str) else "",
        arn=arn if isinstance(arn, str) else "",
        state_value=state_value,
        state_reason=reason if isinstance(reason, str) else None,
    )


__all__ = ["AlarmStateClient", "parse_alarm_description"]
