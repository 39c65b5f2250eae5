"""
Port window validation and node planning.

Each node needs two consecutive host ports: a peer (P2P) port and a control
(RPC) port. A batch of N nodes starting at port P occupies
``P, P+1, ..., P+2N-1``, and the whole batch has to fit inside the port
window the node image is allowed to publish.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from equinode.commands.config import PortWindow, ProvisionerSettings
from equinode.commands.constants import (
    DATA_LAYOUT_SHARED,
    ERROR_NO_PORTS_IN_WINDOW,
    ERROR_PORT_CEILING,
    PORT_CEILING,
    PORTS_PER_NODE,
)
from equinode.commands.errors import ConfigurationError


@dataclass(frozen=True)
class RunFlags:
    """Switches controlling how much of a run is actually performed."""

    execute: bool = False
    overwrite: bool = False
    dry_run: bool = False
    ignore_runtime_checks: bool = False

    @property
    def real_execution(self) -> bool:
        """True when containers are really created (execute without dry run)."""
        return self.execute and not self.dry_run


@dataclass(frozen=True)
class AllocationRequest:
    """A requested batch of nodes."""

    start_index: int
    node_count: int
    port_start: int
    name_prefix: str
    image: str
    flags: RunFlags = field(default_factory=RunFlags)


@dataclass(frozen=True)
class RangeAdjustment:
    """Outcome of validating a port start and node count against a window."""

    port_start: int
    node_count: int
    warnings: tuple[str, ...] = ()

    @property
    def adjusted(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class NodePlan:
    """Everything needed to provision one node."""

    index: int
    name: str
    primary_port: int
    secondary_port: int
    work_dir: Path
    data_dir: Path

    @property
    def ports(self) -> tuple[int, int]:
        return (self.primary_port, self.secondary_port)


def _last_port(port_start: int, node_count: int) -> int:
    return port_start + PORTS_PER_NODE * (node_count - 1) + 1


def _check_ceiling(port_start: int, node_count: int) -> None:
    last_port = _last_port(port_start, node_count)
    if last_port > PORT_CEILING:
        raise ConfigurationError(
            ERROR_PORT_CEILING.format(
                port_start=port_start, last_port=last_port, ceiling=PORT_CEILING
            ),
            details={
                "port_start": port_start,
                "node_count": node_count,
                "last_port": last_port,
                "ceiling": PORT_CEILING,
            },
        )


def validate_range(
    port_start: int, node_count: int, window: PortWindow
) -> RangeAdjustment:
    """Fit a port start and node count into the allowed port window.

    A start below the window is raised to ``window.min``; a node count that
    needs more ports than remain up to ``window.max`` is reduced. Both
    adjustments produce a warning. The function performs no I/O, and feeding
    its result back in yields the same values with no warnings.

    Args:
        port_start: First candidate primary port.
        node_count: Number of nodes requested.
        window: Allowed port window.

    Returns:
        RangeAdjustment with the (possibly adjusted) values and warnings.

    Raises:
        ConfigurationError: If the request exceeds the 16-bit port ceiling or
            no node fits in the window.
    """
    if node_count < 1:
        raise ConfigurationError(
            f"Node count must be at least 1, got {node_count}",
            details={"node_count": node_count},
        )
    if port_start < 1:
        raise ConfigurationError(
            f"Port start must be positive, got {port_start}",
            details={"port_start": port_start},
        )
    # Checked on the raw request before clamping: oversized requests are
    # rejected, not shrunk
    _check_ceiling(port_start, node_count)

    warnings = []
    if port_start < window.min:
        warnings.append(
            f"Port start {port_start} is below minimum {window.min}. "
            f"Adjusting to {window.min}."
        )
        port_start = window.min

    allowed_nodes = (window.max - port_start + 1) // PORTS_PER_NODE
    if allowed_nodes < 1:
        raise ConfigurationError(
            ERROR_NO_PORTS_IN_WINDOW.format(
                min_port=window.min, max_port=window.max, port_start=port_start
            ),
            details={
                "min_port": window.min,
                "max_port": window.max,
                "port_start": port_start,
            },
        )

    if node_count > allowed_nodes:
        warnings.append(
            f"Requested {node_count} nodes needs {node_count * PORTS_PER_NODE} "
            f"ports but only {allowed_nodes * PORTS_PER_NODE} ports are available "
            f"starting at {port_start} within {window.min}-{window.max}. "
            f"Reducing node count from {node_count} to {allowed_nodes}."
        )
        node_count = allowed_nodes

    # A window reaching past the ceiling could still make the adjusted batch invalid
    _check_ceiling(port_start, node_count)

    return RangeAdjustment(
        port_start=port_start, node_count=node_count, warnings=tuple(warnings)
    )


def plan_nodes(
    start_index: int,
    node_count: int,
    port_start: int,
    name_prefix: str,
    settings: ProvisionerSettings,
    base_dir: Optional[Union[str, Path]] = None,
) -> list[NodePlan]:
    """Derive one NodePlan per node index, in index order.

    Node ``i`` is named ``name_prefix + str(start_index + i)`` and gets ports
    ``port_start + 2i`` and ``port_start + 2i + 1``. Its working directory
    lives under ``base_dir``; its data directory is either its own folder
    under the data root or the data root itself, depending on
    ``settings.data_layout``.
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    data_root = (base / settings.data_root).resolve()

    plans = []
    for i in range(node_count):
        name = f"{name_prefix}{start_index + i}"
        primary_port = port_start + PORTS_PER_NODE * i
        if settings.data_layout == DATA_LAYOUT_SHARED:
            data_dir = data_root
        else:
            data_dir = data_root / name
        plans.append(
            NodePlan(
                index=i,
                name=name,
                primary_port=primary_port,
                secondary_port=primary_port + 1,
                work_dir=(base / name).resolve(),
                data_dir=data_dir,
            )
        )
    return plans
