"""Pytest configuration for equinode tests.

Provides a recording fake of the container runtime so provisioning can be
tested without a Docker daemon, plus a bind probe that never touches real
sockets.
"""

import pytest

from equinode.commands.config import ProvisionerSettings
from equinode.commands.errors import LaunchFailure, RuntimeDetectionError
from equinode.commands.port_checker import PortChecker
from equinode.commands.runtime import ContainerRuntime


class FakeRuntime(ContainerRuntime):
    """In-memory ContainerRuntime that records every call."""

    def __init__(
        self, published=None, unreachable=False, failing_names=(), unreachable_after=None
    ):
        self.published = dict(published or {})
        self.unreachable = unreachable
        # Daemon goes away once this many listings have succeeded
        self.unreachable_after = unreachable_after
        self.failing_names = set(failing_names)
        self.list_calls = 0
        self.runs = []

    def list_running_containers(self):
        self.list_calls += 1
        if self.unreachable_after is not None and self.list_calls > self.unreachable_after:
            self.unreachable = True
        if self.unreachable:
            raise RuntimeDetectionError("Failed to connect to Docker: daemon not running")
        return list(self.published)

    def list_published_ports(self, container_id):
        if self.unreachable:
            raise RuntimeDetectionError("Failed to connect to Docker: daemon not running")
        return set(self.published.get(container_id, ()))

    def run_container(self, spec):
        self.runs.append(spec)
        if spec.name in self.failing_names:
            raise LaunchFailure(
                f"Failed to create container {spec.name}: conflict", node_name=spec.name
            )
        return f"{spec.name.lower()}0000000000000"


class FakeBindProbe:
    """Bind probe reporting a fixed set of ports as locally bound."""

    def __init__(self, bound=()):
        self.bound = set(bound)
        self.probed = []

    def __call__(self, port):
        self.probed.append(port)
        return port in self.bound


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def bind_probe():
    return FakeBindProbe()


@pytest.fixture
def checker(runtime, bind_probe):
    return PortChecker(runtime, bind_probe=bind_probe)


@pytest.fixture
def settings():
    return ProvisionerSettings(min_port=18081, max_port=18200)
