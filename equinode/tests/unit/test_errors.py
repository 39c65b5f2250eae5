"""
Unit tests for the equinode typed error classes and result shapes.
"""

from equinode.commands.errors import (
    ConfigurationError,
    EquinodeError,
    FilesystemConflict,
    LaunchFailure,
    NodeError,
    PortConflict,
    RuntimeDetectionError,
)
from equinode.commands.result import fail, ok


class TestEquinodeError:
    """Tests for the base EquinodeError class."""

    def test_basic_error(self):
        error = EquinodeError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.code is None
        assert error.details == {}

    def test_error_with_code(self):
        error = EquinodeError("Something went wrong", code="ERR_001")
        assert str(error) == "[ERR_001] Something went wrong"

    def test_to_dict(self):
        error = EquinodeError("Test error", code="TEST_CODE", details={"key": "value"})
        assert error.to_dict() == {
            "type": "EquinodeError",
            "message": "Test error",
            "code": "TEST_CODE",
            "details": {"key": "value"},
        }


class TestSpecificErrors:
    """Tests for the provisioning error subclasses."""

    def test_configuration_error_defaults(self):
        error = ConfigurationError("bad window", config_file="equinode.toml")
        assert error.code == "CONFIGURATION_ERROR"
        assert error.details == {"config_file": "equinode.toml"}

    def test_runtime_detection_error_keeps_port(self):
        error = RuntimeDetectionError("daemon down", port=18150)
        assert error.code == "RUNTIME_DETECTION_FAILED"
        assert error.port == 18150
        assert error.details["port"] == 18150

    def test_node_errors_share_base(self):
        for error in (
            FilesystemConflict("exists", node_name="Node1", path="/x/Node1"),
            PortConflict("taken", node_name="Node1", conflicts=["1 (bound locally)"]),
            LaunchFailure("failed", node_name="Node1"),
        ):
            assert isinstance(error, NodeError)
            assert error.node_name == "Node1"
            assert error.details["node_name"] == "Node1"

    def test_port_conflict_lists_conflicts(self):
        error = PortConflict("taken", conflicts=["18150 (bound locally)"])
        assert error.code == "PORT_CONFLICT"
        assert error.details["conflicts"] == ["18150 (bound locally)"]

    def test_runtime_detection_error_is_not_a_node_error(self):
        assert not isinstance(RuntimeDetectionError("x"), NodeError)


class TestResults:
    """Tests for ok()/fail() result shapes."""

    def test_ok_shape(self):
        assert ok("Node1", ports=[1, 2]) == {
            "success": True,
            "node": "Node1",
            "status": "created",
            "ports": [1, 2],
        }

    def test_fail_includes_error_info(self):
        error = LaunchFailure("boom", node_name="Node1")
        result = fail("Node1", "boom", error=error)
        assert result["success"] is False
        assert result["status"] == "failed"
        assert result["error"] == "boom"
        assert result["error_type"] == "LaunchFailure"
        assert result["error_code"] == "LAUNCH_FAILED"
        assert result["error_details"] == {"node_name": "Node1"}

    def test_fail_with_plain_exception(self):
        result = fail("Node1", "oops", status="skipped", error=ValueError("oops"))
        assert result["error_type"] == "ValueError"
        assert "error_code" not in result
