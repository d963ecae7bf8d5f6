"""Deployment constants and configuration.

This module centralizes all magic strings, paths, and configuration values
used throughout the deployment process.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for branch-driven Kubernetes deployment.

    This class provides a centralized location for all deployment-related
    constants, making them easy to find, update, and test.

    All attributes are class-level and immutable.
    """

    # Branch routing
    PRODUCTION_BRANCHES: tuple[str, ...] = ("main", "master")
    CANARY_BRANCH: str = "canary"
    PRODUCTION_NAMESPACE: str = "production"

    # Manifest handling
    IMAGE_PLACEHOLDER: str = "{{IMAGE}}"
    EXPOSURE_EXTERNAL: str = "LoadBalancer"
    EXPOSURE_INTERNAL: str = "ClusterIP"
    MANIFESTS_DIR: str = "k8s"
    SHARED_SERVICES_DIR: str = "services"

    # Error text returned by the API server when a resource already exists
    ALREADY_EXISTS_MARKER: str = "AlreadyExists"

    # Rollout verification
    ROLLOUT_TIMEOUT_SECONDS: float = 300.0
    ROLLOUT_POLL_INTERVAL_SECONDS: float = 5.0

    # Image defaults
    DEFAULT_APP_NAME: str = "gceme"
    DEFAULT_REGISTRY_HOST: str = "gcr.io"

    # Local port used by `kubectl proxy` access hints
    KUBECTL_PROXY_PORT: int = 8001

    # Registry URL validation pattern
    # Matches: host.com/path, host:port/path, localhost:5000
    REGISTRY_PATTERN: re.Pattern[str] = re.compile(
        r"^[a-zA-Z0-9][-a-zA-Z0-9.]*[a-zA-Z0-9](:[0-9]+)?(/[a-zA-Z0-9._-]+)*$"
    )

    # RFC 1123 label, the naming rule Kubernetes applies to namespaces
    NAMESPACE_PATTERN: re.Pattern[str] = re.compile(
        r"^[a-z0-9]([-a-z0-9]{0,61}[a-z0-9])?$"
    )


class DeploymentPaths:
    """Path resolver for deployment-related directories and files.

    This class constructs and provides access to all paths needed during
    deployment, derived from the project root.
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize deployment paths.

        Args:
            project_root: Path to the project root directory
        """
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get path to project root."""
        return self._project_root

    @property
    def config_yaml(self) -> Path:
        """Get path to config.yaml."""
        return self.project_root / "config.yaml"

    def resolve(self, path: str | Path) -> Path:
        """Resolve a configured path against the project root."""
        path = Path(path)
        return path if path.is_absolute() else self.project_root / path


DEFAULT_CONSTANTS = DeploymentConstants()
