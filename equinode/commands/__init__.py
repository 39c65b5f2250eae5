"""
Commands module - All available CLI commands.
"""

from equinode.commands.create import create, provision_nodes
from equinode.commands.errors import (
    ConfigurationError,
    EquinodeError,
    FilesystemConflict,
    LaunchFailure,
    NodeError,
    PortConflict,
    RuntimeDetectionError,
)
from equinode.commands.ports import ports
from equinode.commands.runtime import ContainerRuntime, DockerRuntime

__all__ = [
    # Commands
    "create",
    "ports",
    "provision_nodes",
    # Runtime
    "ContainerRuntime",
    "DockerRuntime",
    # Error classes
    "EquinodeError",
    "ConfigurationError",
    "RuntimeDetectionError",
    "NodeError",
    "FilesystemConflict",
    "PortConflict",
    "LaunchFailure",
]
