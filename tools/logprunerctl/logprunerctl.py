#!/usr/bin/env python3
"""logprunerctl: operator helper for inspecting logpruner configuration and alarms."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from logpruner.common.config import DEFAULT_CONFIG_PATH, DEFAULT_IMAGE, Config, load_config, retention_configs
from logpruner.common.environment import require_environment
from logpruner.common.errors import PrunerError
from logpruner.common.logger import configure_logging, get_log_level_from_env
from logpruner.pruning.alarms import AlarmStateClient
from logpruner.pruning.commands import RetentionCommandBuilder, container_command, describe_alarm_command
from logpruner.pruning.decision import decide_action
from logpruner.pruning.executor import MaintenanceExecutor
from logpruner.pruning.models import RetentionConfig

APP = typer.Typer(add_completion=False, help="logpruner operator helper")
CONSOLE = Console(emoji=False)

CONFIG_OPTION = typer.Option(Path(DEFAULT_CONFIG_PATH), "--config", envvar="LOGPRUNER_CONFIG", help="YAML config")


def load_indexes(config_path: Path) -> tuple[Config, Dict[str, RetentionConfig]]:
    try:
        cfg = load_config(config_path)
        return cfg, retention_configs(cfg)
    except PrunerError as exc:
        print(f"[bold red]Invalid configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc


@APP.command("show-config")
def show_config(config: Path = CONFIG_OPTION) -> None:
    """List the configured indices and their retention settings."""

    _, indexes = load_indexes(config)
    table = Table(title=f"Indices in {config}")
    for column in ("Index", "Alarm", "Endpoint", "Older than (days)", "TLS", "Validate TLS", "Prefix"):
        table.add_column(column)
    for name in sorted(indexes):
        item = indexes[name]
        table.add_row(
            name,
            item.alarm_name,
            f"{item.host}:{item.port}",
            str(item.older_than_days),
            "yes" if item.use_tls else "no",
            "yes" if item.tls_validate else "no",
            item.prefix or "-",
        )
    CONSOLE.print(table)


@APP.command()
def render(
    index: str,
    config: Path = CONFIG_OPTION,
    dry_run: bool = typer.Option(False, "--dry-run", help="Render the curator dry-run variant"),
) -> None:
    """Print the exact commands a run would execute for INDEX."""

    cfg, indexes = load_indexes(config)
    if index not in indexes:
        print(f"[bold red]Unknown index[/bold red] '{escape(index)}'")
        raise typer.Exit(code=1)
    item = indexes[index]
    image = cfg.get("logpruner.image", DEFAULT_IMAGE)
    curator = RetentionCommandBuilder(dry_run=dry_run).build(item)
    query = container_command(describe_alarm_command(item.alarm_name), image)
    CONSOLE.print("Query:", shlex.join(query), markup=False, soft_wrap=True)
    CONSOLE.print("Delete:", shlex.join(container_command(curator, image)), markup=False, soft_wrap=True)


@APP.command("check-alarm")
def check_alarm(
    alarm_name: str,
    image: str = typer.Option(DEFAULT_IMAGE, help="Container image with the aws cli"),
) -> None:
    """Query ALARM_NAME and show the decision it implies. Never deletes anything."""

    configure_logging("logprunerctl", get_log_level_from_env("WARNING"))
    try:
        env = require_environment()
        description = AlarmStateClient(MaintenanceExecutor(), env, image).query(alarm_name)
    except PrunerError as exc:
        print(f"[bold red]Alarm query failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    alarm = description.primary
    table = Table(title="Alarm", show_header=False)
    table.add_row("Name", escape(alarm.name))
    table.add_row("ARN", escape(alarm.arn))
    table.add_row("State", escape(alarm.state_value))
    table.add_row("Reason", escape(alarm.state_reason or "-"))
    CONSOLE.print(table)

    try:
        delete_required = decide_action(alarm.state_value)
    except PrunerError as exc:
        print(f"[yellow]Undecidable:[/yellow] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    print(f"Delete action required: [bold]{delete_required}[/bold]")


if __name__ == "__main__":
    APP()
