"""
Ports command - Report whether host ports are free for node use.
"""

import click
from rich import box
from rich.table import Table

from equinode.commands.port_checker import PortChecker
from equinode.commands.runtime import DockerRuntime
from equinode.commands.utils import console


def _status(value, yes: str, no: str) -> str:
    if value is None:
        return "[yellow]unknown[/yellow]"
    return f"[red]{yes}[/red]" if value else f"[green]{no}[/green]"


@click.command()
@click.argument("ports", nargs=-1, required=True, type=click.IntRange(1, 65535))
@click.option(
    "--ignore-docker-checks",
    is_flag=True,
    help="Exit successfully even if Docker could not be queried",
)
def ports(ports, ignore_docker_checks):
    """Check PORTS against local listeners and Docker published ports."""
    checker = PortChecker(DockerRuntime())
    reports = [checker.check(port) for port in ports]

    table = Table(title="Port Availability", box=box.ROUNDED)
    table.add_column("Port", style="cyan")
    table.add_column("Local")
    table.add_column("Docker")
    table.add_column("Detection error", style="yellow")
    for report in reports:
        table.add_row(
            str(report.port),
            _status(report.bound_locally, "bound", "free"),
            _status(report.published_by_runtime, "published", "free"),
            report.detection_error or "",
        )
    console.print(table)

    detection_failed = any(r.detection_failed for r in reports)
    if detection_failed and not ignore_docker_checks:
        console.print(
            "[red]✗ Docker published-port detection failed; "
            "results are incomplete.[/red]"
        )
        raise SystemExit(1)
    if any(r.conflicts for r in reports):
        raise SystemExit(3)
