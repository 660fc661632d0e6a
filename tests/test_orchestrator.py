from __future__ import annotations

from dataclasses import replace

import pytest
from conftest import FakeExecutor, alarm_document

from logpruner.common.errors import ExternalToolError, MalformedResponseError, UnknownAlarmStateError
from logpruner.pruning.alarms import AlarmStateClient
from logpruner.pruning.commands import RetentionCommandBuilder
from logpruner.pruning.models import RetentionConfig
from logpruner.pruning.orchestrator import (
    STAGE_DECIDE,
    STAGE_DELETE,
    STAGE_QUERY,
    PruneOrchestrator,
    create_orchestrator,
)

IMAGE = "my/logpruner:2016-09-12"


def make_orchestrator(
    configs: dict[str, RetentionConfig], executor: FakeExecutor, env: dict[str, str]
) -> PruneOrchestrator:
    return PruneOrchestrator(
        configs=configs,
        alarm_client=AlarmStateClient(executor, env, IMAGE),
        executor=executor,  # type: ignore[arg-type]
        builder=RetentionCommandBuilder(),
        env=env,
        image=IMAGE,
    )


def test_alarm_triggers_deletion(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("ALARM")

    [result] = make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert result.index == "idx1"
    assert result.alarm_state == "ALARM"
    assert result.action_taken is True
    assert result.error is None
    [(argv, env, timeout)] = fake_executor.delete_calls
    assert "--older-than 5 --time-unit days" in argv[-1]
    assert "--host h --port 9200" in argv[-1]
    assert argv[:3] == ["docker", "run", "--rm"]
    assert env == credentials
    assert timeout == 120


def test_ok_skips_deletion(idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("OK")

    [result] = make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert result.action_taken is False
    assert result.ok
    assert result.alarm_state == "OK"
    assert fake_executor.delete_calls == []


def test_insufficient_data_refuses_to_delete(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("INSUFFICIENT_DATA")

    [result] = make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert isinstance(result.error, UnknownAlarmStateError)
    assert result.error.observed == "INSUFFICIENT_DATA"
    assert result.stage == STAGE_DECIDE
    assert result.action_taken is False
    assert fake_executor.delete_calls == []


def test_query_failure_is_isolated_to_its_index(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    configs = {
        f"idx{n}": replace(idx1, index=f"idx{n}", alarm_name=f"a{n}") for n in range(1, 5)
    }
    for n in range(1, 5):
        fake_executor.alarm_outputs[f"a{n}"] = alarm_document("ALARM", name=f"a{n}")
    fake_executor.alarm_outputs["a3"] = ExternalToolError("docker exited with code 1", diagnostic="throttled")

    results = make_orchestrator(configs, fake_executor, credentials).run_all()

    assert len(results) == 4
    by_index = {result.index: result for result in results}
    failed = by_index.pop("idx3")
    assert isinstance(failed.error, ExternalToolError)
    assert failed.stage == STAGE_QUERY
    assert failed.alarm_state is None
    assert failed.action_taken is False
    assert all(result.ok and result.action_taken for result in by_index.values())
    assert len(fake_executor.delete_calls) == 3


def test_malformed_response_recorded_at_query_stage(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = "<html>rate exceeded</html>"

    [result] = make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert isinstance(result.error, MalformedResponseError)
    assert result.stage == STAGE_QUERY
    assert fake_executor.delete_calls == []


def test_deletion_failure_is_recorded(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("ALARM")
    fake_executor.delete_error = ExternalToolError("docker wrote to stderr", diagnostic="ConnectionError")

    [result] = make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert result.stage == STAGE_DELETE
    assert result.action_taken is False
    assert result.alarm_state == "ALARM"
    assert isinstance(result.error, ExternalToolError)


def test_unexpected_error_does_not_stop_the_run(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    idx2 = replace(idx1, index="idx2", alarm_name="a2")
    fake_executor.alarm_outputs["a1"] = RuntimeError("boom")  # type: ignore[assignment]
    fake_executor.alarm_outputs["a2"] = alarm_document("OK", name="a2")

    results = make_orchestrator({"idx1": idx1, "idx2": idx2}, fake_executor, credentials).run_all()

    assert [result.ok for result in results] == [False, True]


def test_create_orchestrator_applies_dry_run(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("ALARM")

    orchestrator = create_orchestrator(
        {"idx1": idx1}, credentials, IMAGE, dry_run=True, executor=fake_executor  # type: ignore[arg-type]
    )
    [result] = orchestrator.run_all()

    assert result.action_taken is True
    [(argv, _, _)] = fake_executor.delete_calls
    assert "--dry-run" in argv[-1]


@pytest.mark.parametrize("state", ["ALARM", "OK"])
def test_every_query_uses_short_timeout(
    state: str, idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document(state)
    make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()
    assert fake_executor.calls[0][2] == 30


def test_unrecognised_state_is_reported_verbatim(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("DEGRADED")

    [result] = make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert isinstance(result.error, UnknownAlarmStateError)
    assert result.error.observed == "DEGRADED"
    assert result.alarm_state == "DEGRADED"


def test_each_container_run_is_named_for_cleanup(
    idx1: RetentionConfig, fake_executor: FakeExecutor, credentials: dict[str, str]
) -> None:
    fake_executor.alarm_outputs["a1"] = alarm_document("ALARM")

    make_orchestrator({"idx1": idx1}, fake_executor, credentials).run_all()

    assert len(fake_executor.calls) == 2
    names = fake_executor.container_names
    assert all(name and name.startswith("logpruner-") for name in names)
    assert names[0] != names[1]
    for (argv, _, _), name in zip(fake_executor.calls, names):
        assert argv[argv.index("--name") + 1] == name
