"""
Node workspace management.

Creates the shared data root and one working directory per node. In dry-run
mode nothing on disk is touched; every mutation is printed as
"Dry run: would ..." instead.
"""

import logging
import os
import shutil
from pathlib import Path

from equinode.commands.errors import FilesystemConflict, NodeError
from equinode.commands.port_window import NodePlan
from equinode.commands.utils import console

logger = logging.getLogger(__name__)


class Workspace:
    """Prepares node directories under a shared data root."""

    def __init__(self, data_root: Path, overwrite: bool = False, dry_run: bool = False):
        self.data_root = Path(data_root)
        self.overwrite = overwrite
        self.dry_run = dry_run
        self._root_announced = False

    def ensure_data_root(self) -> None:
        """Create the shared data root if it is missing. Safe to repeat."""
        if self.data_root.is_dir():
            return
        if self.dry_run:
            if not self._root_announced:
                console.print(f"Dry run: would create data root {self.data_root}")
                self._root_announced = True
            return
        os.makedirs(self.data_root, exist_ok=True)
        console.print(f"[cyan]Created data root {self.data_root}[/cyan]")

    def prepare(self, plan: NodePlan) -> None:
        """Create a node's working and data directories.

        Raises:
            FilesystemConflict: If the working directory exists and overwrite
                is not set. The directory is left untouched.
            NodeError: If a directory could not be removed or created.
        """
        self.ensure_data_root()

        work_dir = plan.work_dir
        if work_dir.is_dir():
            if not self.overwrite:
                raise FilesystemConflict(
                    f"Folder '{work_dir}' already exists. Use --overwrite to replace. "
                    f"Skipping node {plan.name}.",
                    node_name=plan.name,
                    path=str(work_dir),
                )
            if self.dry_run:
                console.print(f"Dry run: would remove existing folder: {work_dir}")
            else:
                console.print(f"[yellow]Removing existing folder: {work_dir}[/yellow]")
                self._run(shutil.rmtree, work_dir, plan, "remove")

        for directory in dict.fromkeys((work_dir, plan.data_dir)):
            if self.dry_run:
                console.print(f"Dry run: would create {directory}")
            else:
                self._run(os.makedirs, directory, plan, "create", exist_ok=True)
                logger.debug("Created %s for %s", directory, plan.name)

    def _run(self, operation, path: Path, plan: NodePlan, verb: str, **kwargs) -> None:
        try:
            operation(path, **kwargs)
        except OSError as e:
            raise NodeError(
                f"Failed to {verb} {path}: {e}",
                node_name=plan.name,
                code="FILESYSTEM_ERROR",
                details={"path": str(path)},
            ) from e
