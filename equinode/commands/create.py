"""
Create command - Provision node folders and launch node containers.

This module provides both CLI and programmatic interfaces:

1. CLI Command (`equinode create`):
   - Plans a batch of nodes on consecutive port pairs
   - Prints the docker command per node, or runs it with --execute
   - Supports dry-run, overwrite and ignoring Docker detection errors

2. Programmatic Interface (`provision_nodes()`):
   - Validates the port window once, then processes nodes one at a time
   - Returns a ProvisionReport with one result per planned node

Per node the steps are: prepare directories, check both ports, render the
launch, then run or preview it. A failure in any step skips only that node,
except a Docker detection failure during a real run, which aborts the
remaining nodes.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import click
from rich import box
from rich.table import Table

from equinode.commands.config import ProvisionerSettings, load_settings
from equinode.commands.constants import (
    DATA_LAYOUTS,
    DEFAULT_PORT_START_AT,
    DEFAULT_START_AT,
    DEFAULT_TO_CREATE,
)
from equinode.commands.errors import (
    ConfigurationError,
    FilesystemConflict,
    NodeError,
    PortConflict,
    RuntimeDetectionError,
)
from equinode.commands.launch import Launcher, build_launch_spec
from equinode.commands.port_checker import PortChecker, collect_conflicts
from equinode.commands.port_window import (
    AllocationRequest,
    RunFlags,
    plan_nodes,
    validate_range,
)
from equinode.commands.result import STATUS_FAILED, STATUS_SKIPPED, fail, ok
from equinode.commands.runtime import ContainerRuntime, DockerRuntime
from equinode.commands.utils import console
from equinode.commands.workspace import Workspace


@dataclass
class ProvisionReport:
    """Outcome of a provisioning run."""

    port_start: int
    node_count: int
    warnings: list[str] = field(default_factory=list)
    results: list[dict[str, Any]] = field(default_factory=list)

    @property
    def succeeded(self) -> list[dict[str, Any]]:
        return [r for r in self.results if r["success"]]

    @property
    def failed(self) -> list[dict[str, Any]]:
        return [r for r in self.results if not r["success"]]


def provision_nodes(
    request: AllocationRequest,
    settings: ProvisionerSettings,
    runtime: Optional[ContainerRuntime] = None,
    base_dir: Optional[Union[str, Path]] = None,
    checker: Optional[PortChecker] = None,
) -> ProvisionReport:
    """
    Provision a batch of nodes.

    Args:
        request: Requested batch and run flags.
        settings: Resolved settings; supplies the allowed port window.
        runtime: Container runtime. Defaults to the local Docker daemon.
        base_dir: Directory holding node folders. Defaults to the cwd.
        checker: Port checker. Defaults to one built on ``runtime``.

    Returns:
        ProvisionReport with the effective port start and node count and one
        result per planned node.

    Raises:
        ConfigurationError: If the batch cannot fit the port window. Raised
            before any node is touched.
        RuntimeDetectionError: If Docker cannot be queried during a real run
            without --ignore-docker-checks. Remaining nodes are not processed;
            the report so far is attached as ``e.report``.
    """
    flags = request.flags
    adjustment = validate_range(
        request.port_start, request.node_count, settings.port_window()
    )
    for warning in adjustment.warnings:
        console.print(f"[yellow]⚠️  Warning: {warning}[/yellow]")

    base = Path(base_dir) if base_dir is not None else Path.cwd()
    plans = plan_nodes(
        request.start_index,
        adjustment.node_count,
        adjustment.port_start,
        request.name_prefix,
        settings,
        base_dir=base,
    )

    if runtime is None:
        runtime = DockerRuntime()
    if checker is None:
        checker = PortChecker(runtime)
    workspace = Workspace(
        (base / settings.data_root).resolve(),
        overwrite=flags.overwrite,
        dry_run=flags.dry_run,
    )
    launcher = Launcher(runtime, flags)

    report = ProvisionReport(
        port_start=adjustment.port_start,
        node_count=adjustment.node_count,
        warnings=list(adjustment.warnings),
    )

    for plan in plans:
        ports = {"ports": list(plan.ports)}
        try:
            workspace.prepare(plan)

            if flags.dry_run:
                console.print(
                    f"[dim]DEBUG: node={plan.name} computed ports: "
                    f"{plan.primary_port}, {plan.secondary_port}[/dim]"
                )

            conflicts = collect_conflicts(checker.check_node(plan, flags))
            if conflicts:
                conflict_list = ", ".join(conflicts)
                console.print(
                    f"[yellow]⚠️  Port conflict for node {plan.name}: "
                    f"{conflict_list}[/yellow]"
                )
                if flags.real_execution:
                    raise PortConflict(
                        f"Cannot create container {plan.name}: {conflict_list}. "
                        "Skipping.",
                        node_name=plan.name,
                        conflicts=conflicts,
                    )
                console.print(
                    f"[yellow]Preview: port conflict for {plan.name} "
                    f"({conflict_list}). Command will be shown but container "
                    "won't be created.[/yellow]"
                )

            spec = build_launch_spec(plan, request.image, settings)
            status = launcher.launch(spec)
            report.results.append(
                ok(plan.name, status=status, conflicts=conflicts, **ports)
            )
        except NodeError as e:
            if isinstance(e, (FilesystemConflict, PortConflict)):
                console.print(f"[yellow]⚠️  {e.message}[/yellow]")
                status = STATUS_SKIPPED
            else:
                console.print(f"[red]✗ {e.message}[/red]")
                status = STATUS_FAILED
            report.results.append(
                fail(plan.name, e.message, status=status, error=e, **ports)
            )
        except RuntimeDetectionError as e:
            e.report = report
            raise

    return report


def _print_summary(report: ProvisionReport) -> None:
    if not report.results:
        return
    table = Table(title="Node Provisioning Summary", box=box.ROUNDED)
    table.add_column("Node", style="cyan")
    table.add_column("Ports", style="magenta")
    table.add_column("Status", style="yellow")
    table.add_column("Details")
    for result in report.results:
        status_style = "green" if result["success"] else "red"
        details = result.get("error") or ", ".join(result.get("conflicts", []))
        table.add_row(
            result["node"],
            ",".join(str(p) for p in result.get("ports", [])),
            f"[{status_style}]{result['status']}[/{status_style}]",
            details,
        )
    console.print(table)


@click.command()
@click.option(
    "--start-at",
    type=click.IntRange(min=1),
    default=DEFAULT_START_AT,
    show_default=True,
    help="Starting index for node numbering",
)
@click.option(
    "--to-create",
    type=click.IntRange(min=1),
    default=DEFAULT_TO_CREATE,
    show_default=True,
    help="Number of nodes to create",
)
@click.option(
    "--port-start-at",
    type=click.IntRange(min=1),
    default=DEFAULT_PORT_START_AT,
    show_default=True,
    help="Starting host port",
)
@click.option("--prefix", type=str, default=None, help="Prefix for node names")
@click.option(
    "--docker-package",
    "--image",
    "image",
    type=str,
    default=None,
    help="Docker image to run",
)
@click.option(
    "--execute", is_flag=True, help="Actually run docker (otherwise print commands)"
)
@click.option(
    "--overwrite", is_flag=True, help="Remove and recreate existing node folders"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Do not modify filesystem or run docker (preview)",
)
@click.option(
    "--ignore-docker-checks",
    is_flag=True,
    help="Ignore Docker CLI/daemon errors and proceed",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to an equinode.toml settings file",
)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory in which node folders are created (default: cwd)",
)
@click.option(
    "--log-level",
    type=int,
    default=None,
    help="Log level passed to every node",
)
@click.option(
    "--data-layout",
    type=click.Choice(DATA_LAYOUTS),
    default=None,
    help="Give each node its own data folder or share the data root",
)
def create(
    start_at,
    to_create,
    port_start_at,
    prefix,
    image,
    execute,
    overwrite,
    dry_run,
    ignore_docker_checks,
    config_path,
    base_dir,
    log_level,
    data_layout,
):
    """Create node folders and run node containers on consecutive port pairs."""
    try:
        settings = load_settings(
            config_path,
            overrides={
                "name_prefix": prefix,
                "image": image,
                "log_level": log_level,
                "data_layout": data_layout,
            },
        )
        request = AllocationRequest(
            start_index=start_at,
            node_count=to_create,
            port_start=port_start_at,
            name_prefix=settings.name_prefix,
            image=settings.image,
            flags=RunFlags(
                execute=execute,
                overwrite=overwrite,
                dry_run=dry_run,
                ignore_runtime_checks=ignore_docker_checks,
            ),
        )
        report = provision_nodes(request, settings, base_dir=base_dir)
    except ConfigurationError as e:
        console.print(f"[red]✗ Error: {e.message}[/red]")
        sys.exit(2)
    except RuntimeDetectionError as e:
        if e.report is not None:
            _print_summary(e.report)
        console.print(f"[red]✗ Run aborted: {e.message}[/red]")
        sys.exit(1)

    _print_summary(report)
    console.print(
        f"[green]Create-Nodes completed: {len(report.succeeded)} of "
        f"{len(report.results)} node(s) processed.[/green]"
    )
