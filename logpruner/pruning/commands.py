"""Rendering of Curator deletion and alarm query commands."""
from __future__ import annotations

import shlex
import uuid
from typing import List

from logpruner.common.environment import REQUIRED_ENV_VARS
from logpruner.pruning.models import RetentionConfig

# Day-partitioned indices are named like logstash-2016.09.12
TIMESTRING = "%Y.%m.%d"


class RetentionCommandBuilder:
    """Builds the Curator command that deletes indices past their retention window."""

    def __init__(self, dry_run: bool = False) -> None:
        self._dry_run = dry_run

    def build(self, cfg: RetentionConfig) -> str:
        """Render the deletion command for ``cfg``; identical input gives identical output."""

        parts: List[str] = ["curator", "--host", shlex.quote(cfg.host), "--port", str(cfg.port)]
        if cfg.use_tls:
            parts.append("--use_ssl")
            if not cfg.tls_validate:
                # Explicit opt-in to skipping certificate validation.
                parts.append("--ssl-no-validate")
        if self._dry_run:
            parts.append("--dry-run")
        parts += [
            "delete",
            "indices",
            "--older-than",
            str(cfg.older_than_days),
            "--time-unit",
            "days",
            "--timestring",
            shlex.quote(TIMESTRING),
        ]
        if cfg.prefix:
            parts += ["--prefix", shlex.quote(cfg.prefix)]
        return " ".join(parts)


def describe_alarm_command(alarm_name: str) -> str:
    return f"aws cloudwatch describe-alarms --alarm-names {shlex.quote(alarm_name)}"


def container_name() -> str:
    return f"logpruner-{uuid.uuid4().hex[:12]}"


def container_command(shell_command: str, image: str, name: str | None = None) -> List[str]:
    """Wrap ``shell_command`` in a throwaway container run.

    Credentials are forwarded by name only so their values never show up in
    the argument list. The image entrypoint is ``/bin/sh``. A ``name`` lets
    the container be killed if the run times out.
    """

    argv = ["docker", "run", "--rm"]
    if name:
        argv += ["--name", name]
    for variable in REQUIRED_ENV_VARS:
        argv += ["-e", variable]
    argv += ["-i", image, "-c", shell_command]
    return argv


__all__ = [
    "RetentionCommandBuilder",
    "TIMESTRING",
    "describe_alarm_command",
    "container_command",
    "container_name",
]
