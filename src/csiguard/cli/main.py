"""Main CLI entry point for csiguard."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from csiguard import __version__

if TYPE_CHECKING:
    from csiguard.core.config import GuardConfig
    from csiguard.core.models import DriverPresence, OperatorCondition, OperatorStatus

console = Console()


class GuardContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str | None):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file, None for defaults
        """
        self.config_path = config_path
        self._config: GuardConfig | None = None

    @property
    def config(self) -> GuardConfig:
        """Get or create config lazily."""
        if self._config is None:
            from csiguard.core.config import GuardConfig

            if self.config_path:
                self._config = GuardConfig.from_file(Path(self.config_path).expanduser())
            else:
                self._config = GuardConfig()
        return self._config


def _conditions_table(title: str, conditions: list[OperatorCondition]) -> Table:
    """Render operator conditions as a table."""
    table = Table(title=title)
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Reason")
    table.add_column("Message")
    for condition in conditions:
        table.add_row(
            condition.type, condition.status.value, condition.reason, escape(condition.message)
        )
    return table


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=None,
    help="Path to configuration file (defaults are used when omitted)",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None) -> None:
    """vSphere CSI driver compatibility guard (csiguard)."""
    ctx.obj = GuardContext(config_path=config)


@cli.command()
@click.option(
    "--snapshot",
    "snapshot_path",
    type=click.Path(exists=True),
    required=True,
    help="YAML description of the cluster and its vSphere platform",
)
@click.option("--show-metrics/--no-show-metrics", default=True, help="Print the error metric")
@click.pass_context
def check(ctx: click.Context, snapshot_path: str, show_metrics: bool) -> None:
    """Run one sync against a cluster snapshot and report the outcome."""
    from csiguard.adapters.connection_provider import FactoryConnectionProvider
    from csiguard.adapters.memory import (
        ClusterSnapshot,
        InMemoryOperandController,
        InMemoryOperatorClient,
    )
    from csiguard.checks.environment_checker import build_environment_checker
    from csiguard.controller.vsphere_controller import VSphereController
    from csiguard.core.exceptions import ClusterDegradedError, ConfigurationError
    from csiguard.utils.logging import setup_logging
    from csiguard.utils.metrics import InstallErrorMetric

    try:
        config = ctx.obj.config
        snapshot = ClusterSnapshot.from_file(snapshot_path)
    except ConfigurationError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(2)

    setup_logging(level=config.logging.level, format=config.logging.format, output="stderr")

    operator_client = InMemoryOperatorClient(snapshot.operator_status)
    operand = InMemoryOperandController()
    controller = VSphereController(
        config=config,
        cluster_state=snapshot.cluster_state(config.driver.name),
        connection_provider=FactoryConnectionProvider(
            snapshot.connect, timeout_seconds=config.connection.timeout_seconds
        ),
        operator_client=operator_client,
        operand=operand,
        checker=build_environment_checker(config),
        error_metric=InstallErrorMetric(name=config.metrics.error_metric_name),
    )

    degraded: ClusterDegradedError | None = None
    try:
        asyncio.run(controller.sync())
    except ClusterDegradedError as e:
        degraded = e

    console.print(
        _conditions_table(f"{controller.name} conditions", operator_client.status.conditions)
    )

    console.print(f"Operand controller started: {operand.running}")

    if show_metrics:
        console.print(
            controller.error_metric.expose(), highlight=False, markup=False, soft_wrap=True
        )

    if degraded is not None:
        console.print(f"[red]✗ Cluster degraded: {escape(str(degraded))}[/red]")
        sys.exit(1)

    console.print("[green]✓ Sync completed[/green]")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show driver presence and controller conditions of a live cluster."""
    from csiguard.adapters.k8s_adapter import ClusterCSIDriverAdapter, KubernetesAdapter
    from csiguard.checks.vsphere.existing_driver import read_driver_presence
    from csiguard.core.exceptions import ConfigurationError
    from csiguard.interfaces.exceptions import InterfaceError
    from csiguard.utils.logging import setup_logging

    try:
        config = ctx.obj.config
    except ConfigurationError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(2)

    setup_logging(level=config.logging.level, format=config.logging.format, output="stderr")

    async def _read_cluster() -> tuple[DriverPresence, OperatorStatus]:
        cluster_state = KubernetesAdapter(
            kubeconfig_path=config.kubernetes.kubeconfig_path,
            context=config.kubernetes.context,
        )
        operator_client = ClusterCSIDriverAdapter(cluster_state.client, config.driver.name)
        presence = await read_driver_presence(cluster_state, config.driver)
        return presence, await operator_client.get_operator_status()

    try:
        presence, operator_status = asyncio.run(_read_cluster())
    except InterfaceError as e:
        console.print(f"[red]✗ Failed to read cluster: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"Driver: {config.driver.name}")
    console.print(f"  Installed by operator: {presence.installed_by_operator}")
    console.print(f"  Foreign driver found: {presence.foreign_driver_found}")
    if presence.foreign_csi_nodes:
        console.print(f"  Foreign CSINode registrations: {', '.join(presence.foreign_csi_nodes)}")

    conditions = [
        c for c in operator_status.conditions if c.type.startswith(config.controller.name)
    ]
    console.print(_conditions_table(f"{config.controller.name} conditions", conditions))


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the configuration file."""
    from csiguard.core.exceptions import ConfigurationError

    try:
        config = ctx.obj.config
    except ConfigurationError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print("[green]✓ Configuration is valid[/green]")
    console.print(f"  Controller: {config.controller.name}")
    console.print(f"  Driver: {config.driver.name}")
    console.print(f"  Minimum vCenter version: {config.checks.min_vcenter_version}")
    console.print(f"  Minimum ESXi version: {config.checks.min_esxi_version}")
    console.print(f"  Minimum hardware version: vmx-{config.checks.min_hardware_version}")
    console.print(f"  Recheck interval: {config.recheck.interval_minutes} minutes")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
