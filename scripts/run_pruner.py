"""Entry point for the periodic log pruning run."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from logpruner.common.config import DEFAULT_CONFIG_PATH, DEFAULT_IMAGE, load_config, retention_configs
from logpruner.common.environment import require_environment
from logpruner.common.errors import ConfigurationError
from logpruner.common.logger import configure_logging, get_log_level_from_env, logger
from logpruner.pruning.orchestrator import create_orchestrator

EXIT_OK = 0
EXIT_INDEX_FAILURES = 1
EXIT_PRECONDITION = 2


def main(argv: Sequence[str] | None = None) -> int:
    """Check every configured alarm and prune indices whose alarm is firing."""

    parser = argparse.ArgumentParser(description="Delete old Elasticsearch indices when their alarm fires")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to logpruner YAML configuration",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Ask curator to report deletions without performing them",
    )
    args = parser.parse_args(argv)

    configure_logging("logpruner", get_log_level_from_env("INFO"))
    try:
        cfg = load_config(args.config)
        configure_logging(
            "logpruner",
            cfg.get("logpruner.log_level", get_log_level_from_env("INFO")),
            cfg.get("logpruner.log_dir"),
        )
        configs = retention_configs(cfg)
        env = require_environment()
    except ConfigurationError as exc:
        logger.error("Error: {}. Exiting now.", exc)
        return EXIT_PRECONDITION

    orchestrator = create_orchestrator(
        configs,
        env,
        image=cfg.get("logpruner.image", DEFAULT_IMAGE),
        dry_run=args.dry_run or bool(cfg.get("logpruner.dry_run", False)),
    )
    results = orchestrator.run_all()
    if any(not result.ok for result in results):
        return EXIT_INDEX_FAILURES
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
