"""Branch to environment resolution.

Maps a branch name onto a deployment tier and the namespace it deploys into:

- ``main`` / ``master``  -> production tier, ``production`` namespace
- ``canary``             -> canary tier, ``production`` namespace
- anything else          -> dev tier, namespace named after the branch

Branch names are used verbatim as namespace names. No sanitization happens
here; ``is_valid_namespace_name`` exists so callers can warn early about a
name the cluster will reject.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.infra.constants import DEFAULT_CONSTANTS

from .models import EnvironmentTier


class EnvironmentResolver:
    """Resolves branch names to (tier, namespace) pairs."""

    def __init__(
        self,
        production_namespace: str = DEFAULT_CONSTANTS.PRODUCTION_NAMESPACE,
        production_branches: Iterable[str] = DEFAULT_CONSTANTS.PRODUCTION_BRANCHES,
        canary_branch: str = DEFAULT_CONSTANTS.CANARY_BRANCH,
    ) -> None:
        self.production_namespace = production_namespace
        self.production_branches = frozenset(production_branches)
        self.canary_branch = canary_branch

    def resolve(self, branch_name: str) -> tuple[EnvironmentTier, str]:
        """Return the tier and namespace for a branch.

        Args:
            branch_name: Branch that triggered the build (case-sensitive)

        Returns:
            Tuple of (EnvironmentTier, namespace name)
        """
        if branch_name in self.production_branches:
            return EnvironmentTier.PRODUCTION, self.production_namespace
        if branch_name == self.canary_branch:
            return EnvironmentTier.CANARY, self.production_namespace
        return EnvironmentTier.DEV, branch_name

    def is_fixed_namespace(self, namespace: str) -> bool:
        """Check whether a namespace is the shared production namespace."""
        return namespace == self.production_namespace


def is_valid_namespace_name(name: str) -> bool:
    """Check a name against the Kubernetes namespace naming rule (RFC 1123 label)."""
    return bool(DEFAULT_CONSTANTS.NAMESPACE_PATTERN.match(name))
