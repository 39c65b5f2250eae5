"""
Unit tests for node workspace preparation.
"""

from unittest.mock import patch

import pytest

from equinode.commands.errors import FilesystemConflict, NodeError
from equinode.commands.port_window import NodePlan
from equinode.commands.workspace import Workspace


def make_plan(tmp_path, name="Node1", data_dir=None):
    work_dir = tmp_path / name
    return NodePlan(
        index=0,
        name=name,
        primary_port=18150,
        secondary_port=18151,
        work_dir=work_dir,
        data_dir=data_dir or work_dir,
    )


class TestWorkspace:
    """Tests for Workspace.prepare and ensure_data_root."""

    def test_creates_work_dir(self, tmp_path):
        plan = make_plan(tmp_path)
        Workspace(tmp_path).prepare(plan)
        assert plan.work_dir.is_dir()

    def test_creates_data_root_and_node_data_dir(self, tmp_path):
        data_root = tmp_path / "data"
        plan = make_plan(tmp_path, data_dir=data_root / "Node1")
        Workspace(data_root).prepare(plan)
        assert data_root.is_dir()
        assert (data_root / "Node1").is_dir()
        assert plan.work_dir.is_dir()

    def test_ensure_data_root_is_idempotent(self, tmp_path):
        workspace = Workspace(tmp_path / "data")
        workspace.ensure_data_root()
        workspace.ensure_data_root()
        assert (tmp_path / "data").is_dir()

    def test_existing_dir_without_overwrite_is_untouched(self, tmp_path):
        plan = make_plan(tmp_path)
        plan.work_dir.mkdir()
        marker = plan.work_dir / "keep.txt"
        marker.write_text("state")

        with pytest.raises(FilesystemConflict) as exc_info:
            Workspace(tmp_path).prepare(plan)

        assert exc_info.value.node_name == "Node1"
        assert exc_info.value.path == str(plan.work_dir)
        assert marker.read_text() == "state"

    def test_existing_dir_with_overwrite_is_recreated(self, tmp_path):
        plan = make_plan(tmp_path)
        plan.work_dir.mkdir()
        (plan.work_dir / "old.txt").write_text("stale")

        Workspace(tmp_path, overwrite=True).prepare(plan)

        assert plan.work_dir.is_dir()
        assert list(plan.work_dir.iterdir()) == []

    @pytest.mark.parametrize("overwrite", [False, True])
    def test_dry_run_never_touches_disk(self, tmp_path, overwrite):
        data_root = tmp_path / "data"
        existing = make_plan(tmp_path, "Node1", data_dir=data_root / "Node1")
        existing.work_dir.mkdir()
        fresh = make_plan(tmp_path, "Node2", data_dir=data_root / "Node2")
        workspace = Workspace(data_root, overwrite=overwrite, dry_run=True)

        with patch("equinode.commands.workspace.os.makedirs") as makedirs, patch(
            "equinode.commands.workspace.shutil.rmtree"
        ) as rmtree:
            if overwrite:
                workspace.prepare(existing)
            else:
                with pytest.raises(FilesystemConflict):
                    workspace.prepare(existing)
            workspace.prepare(fresh)

        makedirs.assert_not_called()
        rmtree.assert_not_called()
        assert not data_root.exists()
        assert not fresh.work_dir.exists()
        assert existing.work_dir.is_dir()

    def test_os_error_becomes_node_error(self, tmp_path):
        plan = make_plan(tmp_path)
        with patch(
            "equinode.commands.workspace.os.makedirs",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(NodeError) as exc_info:
                Workspace(tmp_path).prepare(plan)
        assert exc_info.value.code == "FILESYSTEM_ERROR"
        assert "denied" in exc_info.value.message
