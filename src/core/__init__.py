"""Deployment routing and reconciliation core.

Maps branch events to deployment tiers, renders manifests for them, and
reconciles the result against a cluster.
"""

from .environment import EnvironmentResolver, is_valid_namespace_name
from .errors import (
    ApplyError,
    BuildError,
    DeploymentError,
    ProvisionError,
    ResolutionError,
    RolloutTimeoutError,
    TemplateError,
)
from .image_reference import ImageReferenceBuilder
from .materializer import ManifestMaterializer
from .models import (
    BranchEvent,
    Component,
    DeploymentOutcome,
    DocumentKind,
    EnvironmentTier,
    FailureReason,
    ImageReference,
    ManifestTemplate,
    MaterializedManifest,
    NamespaceInfo,
)
from .namespaces import NamespaceProvisioner
from .pipeline import BuildCollaborator, DeploymentPipeline, ImageCoordinates
from .reconciler import DeploymentReconciler
from .templates import ManifestTemplateStore

__all__ = [
    # Components
    "EnvironmentResolver",
    "ImageReferenceBuilder",
    "ManifestTemplateStore",
    "ManifestMaterializer",
    "NamespaceProvisioner",
    "DeploymentReconciler",
    "DeploymentPipeline",
    "BuildCollaborator",
    "ImageCoordinates",
    "is_valid_namespace_name",
    # Data classes
    "BranchEvent",
    "Component",
    "DeploymentOutcome",
    "DocumentKind",
    "EnvironmentTier",
    "FailureReason",
    "ImageReference",
    "ManifestTemplate",
    "MaterializedManifest",
    "NamespaceInfo",
    # Errors
    "DeploymentError",
    "ResolutionError",
    "TemplateError",
    "ProvisionError",
    "ApplyError",
    "RolloutTimeoutError",
    "BuildError",
]
