"""Per-index alarm check and retention enforcement."""
from __future__ import annotations

from typing import Dict, List, Mapping

from logpruner.common.errors import PrunerError
from logpruner.common.logger import index_logger, logger
from logpruner.pruning.alarms import AlarmStateClient
from logpruner.pruning.commands import RetentionCommandBuilder, container_command, container_name
from logpruner.pruning.decision import decide_action
from logpruner.pruning.executor import DELETE_TIMEOUT_S, MaintenanceExecutor
from logpruner.pruning.models import ExecutionResult, RetentionConfig

STAGE_QUERY = "query"
STAGE_DECIDE = "decide"
STAGE_DELETE = "delete"


class PruneOrchestrator:
    """Checks each index's alarm and deletes old data when the alarm fires.

    Indices are processed one after another and independently: an error while
    handling one index is recorded on its result and the run moves on.
    """

    def __init__(
        self,
        configs: Mapping[str, RetentionConfig],
        alarm_client: AlarmStateClient,
        executor: MaintenanceExecutor,
        builder: RetentionCommandBuilder,
        env: Mapping[str, str],
        image: str,
        delete_timeout: float = DELETE_TIMEOUT_S,
    ) -> None:
        self._configs: Dict[str, RetentionConfig] = dict(configs)
        self._alarm_client = alarm_client
        self._executor = executor
        self._builder = builder
        self._env = dict(env)
        self._image = image
        self._delete_timeout = delete_timeout

    # Public API -----------------------------------------------------------------

    def run_all(self) -> List[ExecutionResult]:
        """Process every configured index and return one result per index."""

        results = [self.run_index(cfg) for cfg in self._configs.values()]
        pruned = sum(1 for result in results if result.action_taken)
        failed = sum(1 for result in results if not result.ok)
        logger.info("Run complete: {} indices processed, {} pruned, {} failed", len(results), pruned, failed)
        return results

    def run_index(self, cfg: RetentionConfig) -> ExecutionResult:
        result = ExecutionResult(index=cfg.index)
        log = index_logger(cfg.index)
        log.info("==> Checking alarm '{}'", cfg.alarm_name)
        log.debug("Config: {}", cfg)
        stage = STAGE_QUERY
        try:
            description = self._alarm_client.query(cfg.alarm_name)
            alarm = description.primary
            result.alarm_state = alarm.state_value
            log.info("Alarm {} ({}) is {}", alarm.name, alarm.arn, alarm.state_value)

            stage = STAGE_DECIDE
            delete_required = decide_action(alarm.state_value)
            log.info("Delete action required: {}", delete_required)
            if not delete_required:
                return result

            stage = STAGE_DELETE
            self._delete(cfg)
            result.action_taken = True
            log.info("Deleted indices older than {} days", cfg.older_than_days)
        except PrunerError as exc:
            self._fail(result, stage, exc)
            log.error("{} stage failed: {}", stage, exc)
        except Exception as exc:
            self._fail(result, stage, exc)
            log.exception("Unexpected error during {} stage", stage)
        return result

    # Internals ------------------------------------------------------------------

    def _delete(self, cfg: RetentionConfig) -> None:
        log = index_logger(cfg.index)
        curator_command = self._builder.build(cfg)
        log.info("Running {}", curator_command)
        name = container_name()
        output = self._executor.run(
            container_command(curator_command, self._image, name),
            self._env,
            self._delete_timeout,
            container_name=name,
        )
        if output.strip():
            log.debug("Curator output: {}", output.strip())

    @staticmethod
    def _fail(result: ExecutionResult, stage: str, exc: Exception) -> None:
        result.error = exc
        result.stage = stage
        result.action_taken = False


def create_orchestrator(
    configs: Mapping[str, RetentionConfig],
    env: Mapping[str, str],
    image: str,
    dry_run: bool = False,
    executor: MaintenanceExecutor | None = None,
) -> PruneOrchestrator:
    """Wire an orchestrator with the default collaborators."""

    executor = executor or MaintenanceExecutor()
    return PruneOrchestrator(
        configs=configs,
        alarm_client=AlarmStateClient(executor, env, image),
        executor=executor,
        builder=RetentionCommandBuilder(dry_run=dry_run),
        env=env,
        image=image,
    )


__all__ = ["PruneOrchestrator", "create_orchestrator", "STAGE_QUERY", "STAGE_DECIDE", "STAGE_DELETE"]
