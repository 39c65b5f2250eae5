"""
Port conflict detection.

A port counts as taken when either:
- a listening socket cannot be bound to it on loopback, or
- a running container publishes it as a host port.

The loopback probe is a best-effort heuristic; another process may grab the
port between the probe and the container start. The runtime probe can fail
outright (Docker missing or daemon down). That outcome is reported separately
from "not published" and handled by DETECTION_FAILURE_POLICY.
"""

import enum
import logging
import socket
from dataclasses import dataclass
from typing import Callable, Optional

from equinode.commands.constants import LOOPBACK_ADDRESS
from equinode.commands.errors import RuntimeDetectionError
from equinode.commands.port_window import NodePlan, RunFlags
from equinode.commands.runtime import ContainerRuntime
from equinode.commands.utils import console

logger = logging.getLogger(__name__)


class DetectionAction(enum.Enum):
    """What to do when published-port detection fails."""

    ABORT = "abort"
    IGNORE = "ignore"
    PREVIEW = "preview"


# (real execution, ignore runtime checks) -> action
DETECTION_FAILURE_POLICY = {
    (True, False): DetectionAction.ABORT,
    (True, True): DetectionAction.IGNORE,
    (False, False): DetectionAction.PREVIEW,
    (False, True): DetectionAction.IGNORE,
}


def detection_failure_action(flags: RunFlags) -> DetectionAction:
    return DETECTION_FAILURE_POLICY[(flags.real_execution, flags.ignore_runtime_checks)]


@dataclass(frozen=True)
class ConflictReport:
    """Availability of a single host port."""

    port: int
    bound_locally: bool
    published_by_runtime: Optional[bool]
    detection_error: Optional[str] = None

    @property
    def detection_failed(self) -> bool:
        return self.published_by_runtime is None

    @property
    def conflicts(self) -> list[str]:
        found = []
        if self.bound_locally:
            found.append(f"{self.port} (bound locally)")
        if self.published_by_runtime:
            found.append(f"{self.port} (published by Docker)")
        return found


def is_port_bound_locally(port: int, host: str = LOOPBACK_ADDRESS) -> bool:
    """Try to bind a listening socket on ``host:port`` and release it."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, port))
            s.listen(1)
    except OSError as e:
        logger.debug("Port %d is not bindable on %s: %s", port, host, e)
        return True
    return False


class PortChecker:
    """Checks host ports against the local socket table and a container runtime."""

    def __init__(
        self,
        runtime: Optional[ContainerRuntime],
        bind_probe: Optional[Callable[[int], bool]] = None,
    ):
        self.runtime = runtime
        self.bind_probe = bind_probe or is_port_bound_locally

    def is_published(self, port: int) -> bool:
        """True if any running container publishes ``port``.

        Raises:
            RuntimeDetectionError: If the runtime cannot be queried.
        """
        if self.runtime is None:
            raise RuntimeDetectionError("No container runtime configured", port=port)
        for container_id in self.runtime.list_running_containers():
            if port in self.runtime.list_published_ports(container_id):
                logger.debug("Port %d is published by container %s", port, container_id)
                return True
        return False

    def check(self, port: int) -> ConflictReport:
        bound_locally = self.bind_probe(port)
        try:
            published: Optional[bool] = self.is_published(port)
            error = None
        except RuntimeDetectionError as e:
            published = None
            error = e.message
        return ConflictReport(
            port=port,
            bound_locally=bound_locally,
            published_by_runtime=published,
            detection_error=error,
        )

    def check_node(self, plan: NodePlan, flags: RunFlags) -> list[ConflictReport]:
        """Check both of a node's ports, applying the detection failure policy.

        Returns:
            One ConflictReport per port, primary first.

        Raises:
            RuntimeDetectionError: If detection failed and the policy says to
                abort the run.
        """
        reports = []
        for port in plan.ports:
            report = self.check(port)
            if report.detection_failed:
                resolve_detection_failure(report, flags)
            reports.append(report)
        return reports


def resolve_detection_failure(report: ConflictReport, flags: RunFlags) -> None:
    """Report a failed runtime probe and abort if the policy requires it."""
    action = detection_failure_action(flags)
    console.print(
        f"[yellow]⚠️  Docker check error for port {report.port}: "
        f"{report.detection_error}[/yellow]"
    )
    if action is DetectionAction.ABORT:
        console.print("[red]✗ Docker checks failed; aborting run.[/red]")
        raise RuntimeDetectionError(
            report.detection_error or "Docker check failed", port=report.port
        )
    if action is DetectionAction.IGNORE:
        console.print(
            "[yellow]Ignoring Docker check errors due to --ignore-docker-checks.[/yellow]"
        )
    else:
        console.print(
            f"[yellow]Preview: published-port detection unavailable for port "
            f"{report.port}.[/yellow]"
        )


def collect_conflicts(reports: list[ConflictReport]) -> list[str]:
    conflicts = []
    for report in reports:
        conflicts.extend(report.conflicts)
    return conflicts
