"""
Typed error classes for equinode.

This module provides the error hierarchy used while provisioning nodes:
- EquinodeError: Base exception for all equinode errors
- ConfigurationError: Invalid settings or an unsatisfiable port window (fatal)
- RuntimeDetectionError: The container runtime could not be queried
- NodeError: Per-node failures that skip a single node
  - FilesystemConflict, PortConflict, LaunchFailure
"""

from typing import Any, Optional


class EquinodeError(Exception):
    """Base exception class for all equinode errors.

    Attributes:
        message: Human-readable error message
        code: Optional error code for programmatic handling
        details: Optional dictionary with additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            result["code"] = self.code
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigurationError(EquinodeError):
    """Configuration-related errors.

    Raised when:
    - The config file is missing or malformed
    - A setting has the wrong type or an impossible value
    - The requested port start and node count cannot fit the port window
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.config_file = config_file
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        super().__init__(
            message, code=code or "CONFIGURATION_ERROR", details=details
        )


class RuntimeDetectionError(EquinodeError):
    """Raised when the container runtime cannot be queried.

    Covers a missing Docker installation, a daemon that is not running and
    any API failure while listing containers or their published ports.
    """

    def __init__(
        self,
        message: str,
        port: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.port = port
        # Partial ProvisionReport, attached when a batch run is aborted
        self.report = None
        details = details or {}
        if port is not None:
            details["port"] = port
        super().__init__(message, code="RUNTIME_DETECTION_FAILED", details=details)


class NodeError(EquinodeError):
    """Errors that only affect a single planned node."""

    def __init__(
        self,
        message: str,
        node_name: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.node_name = node_name
        details = details or {}
        if node_name:
            details["node_name"] = node_name
        super().__init__(message, code=code, details=details)


class FilesystemConflict(NodeError):
    """Raised when a node directory exists and overwrite is not allowed."""

    def __init__(
        self,
        message: str,
        node_name: Optional[str] = None,
        path: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.path = path
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(
            message, node_name=node_name, code="FILESYSTEM_CONFLICT", details=details
        )


class PortConflict(NodeError):
    """Raised when one or both of a node's ports are already in use."""

    def __init__(
        self,
        message: str,
        node_name: Optional[str] = None,
        conflicts: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.conflicts = list(conflicts or [])
        details = details or {}
        if self.conflicts:
            details["conflicts"] = self.conflicts
        super().__init__(
            message, node_name=node_name, code="PORT_CONFLICT", details=details
        )


class LaunchFailure(NodeError):
    """Raised when the container runtime fails to create a node container."""

    def __init__(
        self,
        message: str,
        node_name: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message, node_name=node_name, code="LAUNCH_FAILED", details=details
        )


__all__ = [
    "EquinodeError",
    "ConfigurationError",
    "RuntimeDetectionError",
    "NodeError",
    "FilesystemConflict",
    "PortConflict",
    "LaunchFailure",
]
