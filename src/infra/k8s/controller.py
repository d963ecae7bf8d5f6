"""Abstract Kubernetes controller interface.

Defines the contract for the cluster operations the deployment core needs,
implemented by different backends (kubectl subprocess, kr8s library, etc.).

Apply is assumed idempotent per document: re-applying an unchanged document
is a no-op and a changed document triggers a rolling update. Implementations
delegate that guarantee to the API server; test doubles must honour it too.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .utils import run_sync

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass
class RolloutStatus:
    """Replica counts reported for a Deployment.

    `generation` is metadata.generation and `observed_generation` is
    status.observedGeneration. Until the deployment controller has observed
    the latest spec, the replica counts describe the previous rollout.
    """

    desired_replicas: int
    available_replicas: int = 0
    updated_replicas: int | None = None
    generation: int | None = None
    observed_generation: int | None = None

    @property
    def is_complete(self) -> bool:
        """Check the latest spec is observed and every desired replica is available."""
        if self.generation is not None and (
            self.observed_generation is None
            or self.observed_generation < self.generation
        ):
            return False
        if self.available_replicas < self.desired_replicas:
            return False
        if self.updated_replicas is not None:
            return self.updated_replicas >= self.desired_replicas
        return True


# =============================================================================
# Abstract Controller
# =============================================================================


class ClusterController(ABC):
    """Abstract base class for cluster operations.

    All methods are async to support both sync (kubectl) and async (kr8s)
    implementations. Wrap in `ClusterControllerSync` to call from
    synchronous code.
    """

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    @abstractmethod
    async def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists.

        Args:
            namespace: Namespace to check

        Returns:
            True if the namespace exists, False otherwise
        """
        ...

    @abstractmethod
    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace.

        A namespace that already exists yields a failed result whose stderr
        contains "AlreadyExists".

        Args:
            namespace: Namespace to create

        Returns:
            CommandResult with creation status
        """
        ...

    # =========================================================================
    # Resource Operations
    # =========================================================================

    @abstractmethod
    async def apply_document(self, namespace: str, document: str) -> CommandResult:
        """Apply a YAML document to a namespace.

        Args:
            namespace: Target namespace
            document: Rendered manifest text

        Returns:
            CommandResult with apply status
        """
        ...

    # =========================================================================
    # Rollout Operations
    # =========================================================================

    @abstractmethod
    async def get_rollout_status(
        self, namespace: str, workload_name: str
    ) -> RolloutStatus | None:
        """Get replica counts for a Deployment.

        Args:
            namespace: Kubernetes namespace
            workload_name: Deployment name

        Returns:
            RolloutStatus, or None if the Deployment cannot be read
        """
        ...

    # =========================================================================
    # Service Operations
    # =========================================================================

    @abstractmethod
    async def get_service_external_ip(
        self, namespace: str, service_name: str
    ) -> str | None:
        """Get the load-balancer ingress IP of a Service.

        Args:
            namespace: Kubernetes namespace
            service_name: Service name

        Returns:
            IP or hostname, or None if not (yet) assigned
        """
        ...


class ClusterControllerSync:
    """Blocking facade over a ClusterController.

    Each call runs the coroutine to completion with `run_sync()`.
    """

    def __init__(self, controller: ClusterController) -> None:
        self._controller = controller

    @property
    def controller(self) -> ClusterController:
        return self._controller

    def namespace_exists(self, namespace: str) -> bool:
        return run_sync(self._controller.namespace_exists(namespace))

    def create_namespace(self, namespace: str) -> CommandResult:
        return run_sync(self._controller.create_namespace(namespace))

    def apply_document(self, namespace: str, document: str) -> CommandResult:
        return run_sync(self._controller.apply_document(namespace, document))

    def get_rollout_status(
        self, namespace: str, workload_name: str
    ) -> RolloutStatus | None:
        return run_sync(self._controller.get_rollout_status(namespace, workload_name))

    def get_service_external_ip(self, namespace: str, service_name: str) -> str | None:
        return run_sync(
            self._controller.get_service_external_ip(namespace, service_name)
        )
