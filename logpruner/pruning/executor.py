"""Bounded execution of external maintenance commands."""
from __future__ import annotations

import subprocess
from typing import Mapping, Sequence

from logpruner.common.errors import CommandTimeoutError, ExternalToolError
from logpruner.common.logger import logger

QUERY_TIMEOUT_S = 30.0
DELETE_TIMEOUT_S = 120.0
KILL_TIMEOUT_S = 15.0


class MaintenanceExecutor:
    """Runs external commands in an isolated environment and captures stdout."""

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str],
        timeout: float,
        container_name: str | None = None,
    ) -> str:
        """Run ``command`` with exactly ``env`` and return its stdout.

        Any output on stderr counts as a failure even when the exit code is
        zero; the wrapped tools report partial failures that way. If the run
        times out, the named container (when given) is killed along with the
        local process.
        """

        argv = list(command)
        logger.debug("Executing {} (timeout {}s)", argv[0] if argv else "<empty>", timeout)
        try:
            result = subprocess.run(
                argv,
                env=dict(env),
                text=True,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            if container_name:
                self._kill_container(container_name, env)
            raise CommandTimeoutError(
                f"{argv[0]} timed out after {timeout}s",
                command=argv,
                diagnostic=_decode(exc.stderr),
            ) from exc
        except OSError as exc:
            raise ExternalToolError(f"Unable to start {argv[0] if argv else 'command'}: {exc}", command=argv) from exc

        if result.stderr:
            raise ExternalToolError(
                f"{argv[0]} wrote to stderr (exit code {result.returncode})",
                command=argv,
                returncode=result.returncode,
                diagnostic=result.stderr,
            )
        if result.returncode != 0:
            raise ExternalToolError(
                f"{argv[0]} exited with code {result.returncode}",
                command=argv,
                returncode=result.returncode,
                diagnostic=result.stdout,
            )
        return result.stdout

    def _kill_container(self, name: str, env: Mapping[str, str]) -> None:
        try:
            result = subprocess.run(
                ["docker", "kill", name],
                env=dict(env),
                text=True,
                capture_output=True,
                timeout=KILL_TIMEOUT_S,
                check=False,
            )
        except (subprocess.TimeoutExpired, OSError) as exc:
            logger.warning("Could not kill container {} after timeout: {}", name, exc)
            return
        if result.returncode != 0:
            logger.warning("docker kill {} exited with code {}: {}", name, result.returncode, result.stderr.strip())
        else:
            logger.info("Killed container {} after timeout", name)


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


__all__ = ["MaintenanceExecutor", "QUERY_TIMEOUT_S", "DELETE_TIMEOUT_S", "KILL_TIMEOUT_S"]
