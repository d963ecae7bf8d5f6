"""Namespace provisioning for per-branch environments.

Dev namespaces are created on first deployment of a branch and never
deleted here; retiring them is a manual operation. The production namespace
is reserved: a dev branch that happens to share its name is refused.
"""

from __future__ import annotations

from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import ClusterControllerSync

from .errors import ProvisionError
from .models import NamespaceInfo


class NamespaceProvisioner:
    """Ensures target namespaces exist (create-if-absent)."""

    def __init__(
        self,
        cluster: ClusterControllerSync,
        fixed_namespaces: frozenset[str] = frozenset(
            {DEFAULT_CONSTANTS.PRODUCTION_NAMESPACE}
        ),
    ) -> None:
        self.cluster = cluster
        self.fixed_namespaces = fixed_namespaces

    def ensure(self, namespace: str) -> NamespaceInfo:
        """Make sure a namespace exists.

        A concurrent creator winning the race is treated as success. Reserved
        namespaces are never provisioned for a branch.

        Args:
            namespace: Namespace name

        Returns:
            NamespaceInfo; `created` is True only if this call created it

        Raises:
            ProvisionError: If the namespace is reserved, or creation fails
                            for any other reason
        """
        if namespace in self.fixed_namespaces:
            raise ProvisionError(
                f"Namespace '{namespace}' is reserved for the production tiers",
                details="A dev branch cannot deploy into it; rename the branch.",
            )

        if self.cluster.namespace_exists(namespace):
            logger.debug(f"Namespace {namespace} already exists")
            return NamespaceInfo(name=namespace, exists=True)

        result = self.cluster.create_namespace(namespace)
        if result.success:
            logger.info(f"Created namespace {namespace}")
            return NamespaceInfo(name=namespace, exists=True, created=True)

        if DEFAULT_CONSTANTS.ALREADY_EXISTS_MARKER in result.stderr:
            logger.info(f"Namespace {namespace} was created concurrently")
            return NamespaceInfo(name=namespace, exists=True)

        raise ProvisionError(
            f"Failed to create namespace '{namespace}'",
            details=result.stderr.strip() or None,
        )
