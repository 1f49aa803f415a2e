# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Content Factory Infrastructure CLI Commands.

Provides a CLI for one-shot health checks, running the monitoring stack
with its HTTP health server, and inspecting the effective configuration.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from content_factory_infra.enums import EnumHealthStatus
from content_factory_infra.errors import ProtocolConfigurationError
from content_factory_infra.infrastructure.connection_config import ConnectionConfig
from content_factory_infra.models import ModelHealthCheckResponse
from content_factory_infra.observability.monitoring_config import MonitoringConfig
from content_factory_infra.utils import mask_dsn, mask_url

console = Console()

_STATUS_STYLE: dict[EnumHealthStatus, str] = {
    EnumHealthStatus.HEALTHY: "green",
    EnumHealthStatus.DEGRADED: "yellow",
    EnumHealthStatus.UNHEALTHY: "red",
}


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level for infrastructure loggers",
)
def cli(log_level: str) -> None:
    """Content Factory Infrastructure CLI."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_monitoring_config(config_file: Optional[str]) -> MonitoringConfig:
    try:
        if config_file:
            return MonitoringConfig.from_yaml(config_file)
        return MonitoringConfig.from_environment()
    except ProtocolConfigurationError as e:
        console.print(f"[red]Invalid monitoring configuration: {e.message}[/red]")
        raise SystemExit(2)


def _load_connection_config() -> Optional[ConnectionConfig]:
    try:
        return ConnectionConfig.from_environment()
    except ProtocolConfigurationError as e:
        if e.context.get("variable") == "DATABASE_URL":
            return None
        console.print(f"[red]Invalid database configuration: {e.message}[/red]")
        raise SystemExit(2)


@cli.command("health")
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON response")
def health_cmd(as_json: bool) -> None:
    """Run the aggregated health check once. Exit code 1 when unhealthy."""
    response, http_status = asyncio.run(_run_health())
    if as_json:
        click.echo(response.model_dump_json(indent=2))
    else:
        _print_health(response)
    raise SystemExit(0 if http_status < 500 else 1)


async def _run_health() -> tuple[ModelHealthCheckResponse, int]:
    from content_factory_infra.infrastructure.database_connection_manager import (
        DatabaseConnectionManager,
    )
    from content_factory_infra.services.service_health_aggregator import (
        HealthCheckAggregator,
    )

    connection_config = _load_connection_config()
    manager = (
        DatabaseConnectionManager(connection_config)
        if connection_config is not None
        else None
    )
    try:
        return await HealthCheckAggregator(connection_manager=manager).run()
    finally:
        if manager is not None:
            await manager.shutdown()


def _print_health(response: ModelHealthCheckResponse) -> None:
    style = _STATUS_STYLE[response.status]
    console.print(
        f"[bold {style}]{response.status.value.upper()}[/bold {style}] "
        f"(version {response.version}, environment {response.environment})"
    )
    table = Table(title="Service Checks")
    table.add_column("Service", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Time (ms)", justify="right", style="dim")
    table.add_column("Error")
    for check in response.checks:
        check_style = _STATUS_STYLE[check.status]
        table.add_row(
            check.service,
            f"[{check_style}]{check.status.value}[/{check_style}]",
            f"{check.response_time_ms:.1f}",
            check.error or "-",
        )
    console.print(table)
    summary = response.summary
    console.print(
        f"{summary.healthy}/{summary.total} healthy, "
        f"{summary.degraded} degraded, {summary.unhealthy} unhealthy"
    )


@cli.command("serve")
@click.option("--port", type=int, default=None, help="Health server port")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file overlaying the monitoring configuration",
)
def serve_cmd(port: Optional[int], config_file: Optional[str]) -> None:
    """Run monitoring and the health server until interrupted."""
    monitoring_config = _load_monitoring_config(config_file)
    connection_config = _load_connection_config()
    try:
        asyncio.run(_run_serve(monitoring_config, connection_config, port))
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


async def _run_serve(
    monitoring_config: MonitoringConfig,
    connection_config: Optional[ConnectionConfig],
    port: Optional[int],
) -> None:
    from content_factory_infra.infrastructure.container import InfraContainer

    container = InfraContainer(
        monitoring_config=monitoring_config,
        connection_config=connection_config,
        health_port=port,
    )
    await container.start()
    console.print(
        f"[bold green]Serving health on port {container.health_server.port}[/bold green]"
    )
    try:
        await asyncio.Event().wait()
    finally:
        await container.shutdown()


@cli.command("config")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file overlaying the monitoring configuration",
)
def config_cmd(config_file: Optional[str]) -> None:
    """Print the effective configuration with secrets masked."""
    monitoring_config = _load_monitoring_config(config_file)
    connection_config = _load_connection_config()

    table = Table(title="Effective Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    if connection_config is None:
        table.add_row("database.dsn", "[yellow]not configured[/yellow]")
    else:
        table.add_row("database.dsn", mask_dsn(connection_config.dsn))
        for name in (
            "min_connections",
            "max_connections",
            "retry_attempts",
            "circuit_threshold",
            "circuit_cooldown_seconds",
            "max_reconnect_attempts",
            "health_check_interval_seconds",
        ):
            table.add_row(f"database.{name}", str(getattr(connection_config, name)))

    for name in (
        "environment",
        "service_name",
        "app_version",
        "health_check_interval_seconds",
        "retention_days",
        "max_entries",
        "error_rate_threshold",
        "response_time_threshold_ms",
        "memory_usage_threshold",
    ):
        table.add_row(f"monitoring.{name}", str(getattr(monitoring_config, name)))
    table.add_row(
        "monitoring.webhook_url",
        mask_url(monitoring_config.webhook_url) if monitoring_config.webhook_url else "-",
    )
    table.add_row(
        "monitoring.email_endpoint",
        (
            mask_url(monitoring_config.email_endpoint)
            if monitoring_config.email_endpoint
            else "-"
        ),
    )
    console.print(table)


if __name__ == "__main__":
    cli()
