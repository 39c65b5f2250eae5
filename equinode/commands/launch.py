"""
Launch command rendering and execution for a single node.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path

from equinode.commands.config import ProvisionerSettings
from equinode.commands.constants import RESTART_POLICY
from equinode.commands.port_window import NodePlan, RunFlags
from equinode.commands.result import STATUS_CREATED, STATUS_PREVIEWED
from equinode.commands.utils import console


@dataclass(frozen=True)
class LaunchSpec:
    """A fully rendered container launch for one node."""

    name: str
    image: str
    ports: tuple[int, int]
    host_data_dir: Path
    container_data_path: str
    args: tuple[str, ...]
    restart_policy: str = RESTART_POLICY

    def to_argv(self) -> list[str]:
        """Equivalent ``docker run`` invocation."""
        argv = [
            "docker",
            "run",
            "-dit",
            "--name",
            self.name,
            "--restart",
            self.restart_policy,
        ]
        for port in self.ports:
            argv.extend(["-p", f"{port}:{port}"])
        argv.extend(["-v", f"{self.host_data_dir}:{self.container_data_path}"])
        argv.append(self.image)
        argv.extend(self.args)
        return argv

    def command_line(self) -> str:
        return shlex.join(self.to_argv())


def build_launch_spec(
    plan: NodePlan, image: str, settings: ProvisionerSettings
) -> LaunchSpec:
    """Render the launch for a node. Host ports map 1:1 onto container ports."""
    data_path = settings.container_data_path
    args = (
        settings.network_flag,
        f"--data-dir={data_path}",
        f"--p2p-bind-port={plan.primary_port}",
        f"--rpc-bind-port={plan.secondary_port}",
        f"--add-exclusive-node={settings.bootstrap_peer}",
        f"--log-level={settings.log_level}",
    )
    return LaunchSpec(
        name=plan.name,
        image=image,
        ports=plan.ports,
        host_data_dir=plan.data_dir,
        container_data_path=data_path,
        args=args,
    )


class Launcher:
    """Runs or previews node launches against a container runtime."""

    def __init__(self, runtime, flags: RunFlags):
        self.runtime = runtime
        self.flags = flags

    def launch(self, spec: LaunchSpec) -> str:
        """Run the container, or print what would run.

        Returns:
            STATUS_CREATED when a container was started, otherwise
            STATUS_PREVIEWED.

        Raises:
            LaunchFailure: If the runtime rejects the container.
        """
        if not self.flags.execute:
            console.print(
                f"DRY RUN: {spec.command_line()}", markup=False, soft_wrap=True
            )
            return STATUS_PREVIEWED

        primary, secondary = spec.ports
        console.print(
            f"[cyan]Creating Docker container: {spec.name} "
            f"(ports {primary},{secondary}) ...[/cyan]"
        )
        if self.flags.dry_run:
            console.print(
                f"Dry run: would run: {spec.command_line()}",
                markup=False,
                soft_wrap=True,
            )
            return STATUS_PREVIEWED

        container_id = self.runtime.run_container(spec)
        console.print(
            f"[green]✓ Container {spec.name} created ({container_id[:12]})[/green]"
        )
        return STATUS_CREATED
