"""Kubernetes infrastructure abstraction layer.

This module provides a clean abstraction over the cluster operations the
deployment core needs, supporting multiple backends (kubectl subprocess,
kr8s library).

Example:
    from src.infra.k8s import get_cluster_controller_sync

    cluster = get_cluster_controller_sync("kubectl")
    if not cluster.namespace_exists("feature-x"):
        cluster.create_namespace("feature-x")
"""

from .controller import (
    ClusterController,
    ClusterControllerSync,
    CommandResult,
    RolloutStatus,
)
from .helpers import get_cluster_controller, get_cluster_controller_sync
from .kubectl_controller import KubectlController
from .utils import run_sync

__all__ = [
    # Controller classes
    "ClusterController",
    "ClusterControllerSync",
    "KubectlController",
    # Data classes
    "CommandResult",
    "RolloutStatus",
    # Factories
    "get_cluster_controller",
    "get_cluster_controller_sync",
    # Utilities
    "run_sync",
]
