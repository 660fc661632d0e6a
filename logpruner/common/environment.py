"""Credential preconditions and child process environment bindings."""
from __future__ import annotations

import os
from typing import Dict, Mapping

from logpruner.common.errors import ConfigurationError

REQUIRED_ENV_VARS = ("AWS_DEFAULT_REGION", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")
DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


def require_environment(environ: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Return the bindings handed to child processes.

    Raises :class:`ConfigurationError` if any required variable is missing or
    empty. Only the required variables and ``PATH`` are passed on.
    """

    source = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not source.get(name, "").strip()]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
    bindings = {name: source[name] for name in REQUIRED_ENV_VARS}
    bindings["PATH"] = source.get("PATH") or DEFAULT_PATH
    return bindings


__all__ = ["REQUIRED_ENV_VARS", "require_environment"]
