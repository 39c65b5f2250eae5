"""
Container runtime access.

The provisioner only needs three things from a container runtime: the list
of running containers, the host ports each of them publishes, and a way to
start a new container. ContainerRuntime names that capability so the port
checker and launcher can be exercised against a fake; DockerRuntime is the
real implementation on top of the Docker SDK.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import docker
import requests

from equinode.commands.errors import LaunchFailure, RuntimeDetectionError
from equinode.commands.launch import LaunchSpec

logger = logging.getLogger(__name__)


class ContainerRuntime(ABC):
    """Capability interface over a container runtime."""

    @abstractmethod
    def list_running_containers(self) -> list[str]:
        """Return the ids of all running containers.

        Raises:
            RuntimeDetectionError: If the runtime cannot be reached.
        """

    @abstractmethod
    def list_published_ports(self, container_id: str) -> set[int]:
        """Return the host ports published by a container.

        Raises:
            RuntimeDetectionError: If the runtime cannot be reached.
        """

    @abstractmethod
    def run_container(self, spec: LaunchSpec) -> str:
        """Create and start a container, returning its id.

        Raises:
            LaunchFailure: If the container could not be created.
        """


def _host_ports(bindings: Optional[dict]) -> set[int]:
    ports = set()
    for host_bindings in (bindings or {}).values():
        for binding in host_bindings or []:
            host_port = str(binding.get("HostPort") or "")
            if host_port.isdigit():
                ports.add(int(host_port))
    return ports


class DockerRuntime(ContainerRuntime):
    """ContainerRuntime backed by the local Docker daemon."""

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """Initialize with an optional Docker client.

        Args:
            client: Optional Docker client. If not provided, one is created
                from the environment on first use so that an unreachable
                daemon surfaces as a detection error instead of at startup.
        """
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except (docker.errors.DockerException, requests.RequestException) as e:
                raise RuntimeDetectionError(
                    f"Failed to connect to Docker: {e}"
                ) from e
        return self._client

    def list_running_containers(self) -> list[str]:
        try:
            containers = self.client.containers.list()
        except (docker.errors.DockerException, requests.RequestException) as e:
            raise RuntimeDetectionError(f"Docker error: {e}") from e
        return [container.id for container in containers]

    def list_published_ports(self, container_id: str) -> set[int]:
        try:
            container = self.client.containers.get(container_id)
        except docker.errors.NotFound:
            # Container exited between listing and inspection
            logger.debug("Container %s disappeared before inspection", container_id)
            return set()
        except (docker.errors.DockerException, requests.RequestException) as e:
            raise RuntimeDetectionError(f"Docker error: {e}") from e

        attrs = container.attrs or {}
        ports = _host_ports(attrs.get("NetworkSettings", {}).get("Ports"))
        if not ports:
            ports = _host_ports(attrs.get("HostConfig", {}).get("PortBindings"))
        return ports

    def run_container(self, spec: LaunchSpec) -> str:
        try:
            container = self.client.containers.run(
                spec.image,
                command=list(spec.args),
                name=spec.name,
                detach=True,
                stdin_open=True,
                tty=True,
                restart_policy={"Name": spec.restart_policy},
                ports={f"{port}/tcp": port for port in spec.ports},
                volumes={
                    str(spec.host_data_dir): {
                        "bind": spec.container_data_path,
                        "mode": "rw",
                    }
                },
            )
        except (
            docker.errors.DockerException,
            requests.RequestException,
            RuntimeDetectionError,
        ) as e:
            raise LaunchFailure(
                f"Failed to create container {spec.name}: {e}",
                node_name=spec.name,
            ) from e
        return container.id
