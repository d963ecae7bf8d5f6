"""Error types raised by the deployment core.

Every error carries a short message plus optional details, which the CLI
prints in a separate panel. The reconciler converts these into a failed
DeploymentOutcome instead of letting them escape.
"""

from __future__ import annotations


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ResolutionError(DeploymentError):
    """Branch could not be mapped to an environment.

    Resolution is total over branch names, so nothing raises this today.
    """


class TemplateError(DeploymentError):
    """A manifest template is malformed or lacks its image placeholder."""


class ProvisionError(DeploymentError):
    """Namespace creation failed for a reason other than it already existing."""


class ApplyError(DeploymentError):
    """The cluster rejected a document."""


class RolloutTimeoutError(DeploymentError):
    """Workloads did not become available within the verification bound."""


class BuildError(DeploymentError):
    """Tests or the image build reported failure."""
