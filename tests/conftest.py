from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

import pytest

from logpruner.pruning.models import RetentionConfig

CREDENTIALS = {
    "AWS_DEFAULT_REGION": "eu-west-1",
    "AWS_ACCESS_KEY_ID": "AKIDEXAMPLE",
    "AWS_SECRET_ACCESS_KEY": "wJalrXUtnFEMI/K7MDENG",
}


def alarm_document(state: str, name: str = "a1", **extra: Any) -> str:
    record = {
        "AlarmName": name,
        "AlarmArn": f"arn:aws:cloudwatch:eu-west-1:123456789012:alarm:{name}",
        "StateValue": state,
        "StateReason": "Threshold Crossed",
    }
    record.update(extra)
    return json.dumps({"MetricAlarms": [record]})


class FakeExecutor:
    """Records invocations and answers alarm queries from canned output."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict[str, str], float]] = []
        self.alarm_outputs: dict[str, str | Exception] = {}
        self.delete_error: Exception | None = None
        self.container_names: list[str | None] = []

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str],
        timeout: float,
        container_name: str | None = None,
    ) -> str:
        argv = list(command)
        self.calls.append((argv, dict(env), timeout))
        self.container_names.append(container_name)
        shell_command = argv[-1]
        if shell_command.startswith("aws cloudwatch describe-alarms"):
            alarm_name = shell_command.rsplit(" ", 1)[-1]
            answer = self.alarm_outputs[alarm_name]
            if isinstance(answer, Exception):
                raise answer
            return answer
        if self.delete_error is not None:
            raise self.delete_error
        return ""

    @property
    def delete_calls(self) -> list[tuple[list[str], dict[str, str], float]]:
        return [call for call in self.calls if call[0][-1].startswith("curator")]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def credentials() -> dict[str, str]:
    return dict(CREDENTIALS, PATH="/usr/bin:/bin")


@pytest.fixture()
def idx1() -> RetentionConfig:
    return RetentionConfig(index="idx1", alarm_name="a1", host="h", port=9200, older_than_days=5)
