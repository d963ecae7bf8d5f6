"""Value types shared by the deployment core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# =============================================================================
# Enumerations
# =============================================================================


class EnvironmentTier(str, Enum):
    """Deployment target class."""

    PRODUCTION = "production"
    CANARY = "canary"
    DEV = "dev"


class DocumentKind(str, Enum):
    """Kinds of manifest documents the pipeline knows how to handle."""

    SERVICE = "service"
    DEPLOYMENT = "deployment"


class Component(str, Enum):
    """Application component a document belongs to."""

    FRONTEND = "frontend"
    BACKEND = "backend"


class FailureReason(str, Enum):
    """Name of the pipeline step that ended a run."""

    TESTS_FAILED = "tests-failed"
    IMAGE_BUILD_FAILED = "image-build-failed"
    NAMESPACE_PROVISION_FAILED = "namespace-provision-failed"
    TEMPLATE_ERROR = "template-error"
    SERVICE_APPLY_FAILED = "service-apply-failed"
    WORKLOAD_APPLY_FAILED = "workload-apply-failed"
    ROLLOUT_TIMEOUT = "rollout-timeout"


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class BranchEvent:
    """A single CI trigger for a branch push."""

    branch_name: str
    build_number: int
    commit_ref: str = ""


@dataclass(frozen=True)
class ImageReference:
    """Fully qualified container image reference.

    Renders as ``registry_host/project_id/app_name:branch_name.build_number``.
    """

    registry_host: str
    project_id: str
    app_name: str
    branch_name: str
    build_number: int

    @property
    def repository(self) -> str:
        """Image name without the tag."""
        return f"{self.registry_host}/{self.project_id}/{self.app_name}"

    @property
    def tag(self) -> str:
        """Tag portion of the reference."""
        return f"{self.branch_name}.{self.build_number}"

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"


@dataclass(frozen=True)
class ManifestTemplate:
    """A parameterized manifest document.

    Attributes:
        tier: Tier the document belongs to, or None for shared service documents
        kind: Service or deployment
        component: Frontend or backend
        name: Value of metadata.name
        raw_document: YAML text exactly as authored
        image_placeholder: Token replaced with the image reference, if any
        source: File the document was loaded from
    """

    tier: EnvironmentTier | None
    kind: DocumentKind
    component: Component
    name: str
    raw_document: str
    image_placeholder: str | None = None
    source: str = ""

    @property
    def is_workload(self) -> bool:
        return self.kind == DocumentKind.DEPLOYMENT


@dataclass(frozen=True)
class MaterializedManifest:
    """A concrete manifest ready to be applied."""

    tier: EnvironmentTier
    kind: DocumentKind
    component: Component
    name: str
    rendered_document: str

    @property
    def qualified_name(self) -> str:
        """kind/name identifier used in logs and outcomes."""
        return f"{self.kind.value}/{self.name}"


@dataclass(frozen=True)
class NamespaceInfo:
    """Result of ensuring a namespace."""

    name: str
    exists: bool
    created: bool = False


@dataclass(frozen=True)
class DeploymentOutcome:
    """The observable result of one pipeline run."""

    tier: EnvironmentTier
    namespace: str
    image_reference: ImageReference
    verified: bool
    failure_reason: str | None = None
    failure_detail: str | None = None
    applied: tuple[str, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.verified and self.failure_reason is None
