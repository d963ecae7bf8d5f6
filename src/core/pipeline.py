"""End-to-end deployment pipeline for one branch event.

branch event -> tests -> image reference -> image build/push ->
environment resolution -> reconciliation.

CI state (build numbers, registry project, credentials) is injected by the
caller per run; the pipeline holds no state between runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from loguru import logger

from .environment import EnvironmentResolver, is_valid_namespace_name
from .image_reference import ImageReferenceBuilder
from .models import (
    BranchEvent,
    DeploymentOutcome,
    EnvironmentTier,
    FailureReason,
    ImageReference,
)
from .reconciler import DeploymentReconciler


class BuildCollaborator(ABC):
    """External test runner and image builder.

    Only success or failure is observable.
    """

    @abstractmethod
    def run_tests(self) -> bool:
        """Run the project's tests."""
        ...

    @abstractmethod
    def build_and_push_image(self, image_reference: ImageReference) -> bool:
        """Build the image and push it under the given reference."""
        ...


@dataclass(frozen=True)
class ImageCoordinates:
    """Registry location and application name for built images."""

    registry_host: str
    project_id: str
    app_name: str


def plan_event(
    event: BranchEvent,
    coordinates: ImageCoordinates,
    resolver: EnvironmentResolver,
    image_builder: ImageReferenceBuilder | None = None,
) -> tuple[EnvironmentTier, str, ImageReference]:
    """Resolve tier, namespace and image reference for an event."""
    tier, namespace = resolver.resolve(event.branch_name)
    image = (image_builder or ImageReferenceBuilder()).build(
        coordinates.registry_host,
        coordinates.project_id,
        coordinates.app_name,
        event.branch_name,
        event.build_number,
    )
    return tier, namespace, image


class DeploymentPipeline:
    """Runs the full control flow for a branch event."""

    def __init__(
        self,
        coordinates: ImageCoordinates,
        build: BuildCollaborator,
        reconciler: DeploymentReconciler,
        resolver: EnvironmentResolver | None = None,
        image_builder: ImageReferenceBuilder | None = None,
    ) -> None:
        self.coordinates = coordinates
        self.build = build
        self.reconciler = reconciler
        self.resolver = resolver or EnvironmentResolver()
        self.image_builder = image_builder or ImageReferenceBuilder()

    def plan(self, event: BranchEvent) -> tuple[EnvironmentTier, str, ImageReference]:
        """Resolve the target and image for an event without side effects."""
        return plan_event(event, self.coordinates, self.resolver, self.image_builder)

    def run(
        self,
        event: BranchEvent,
        *,
        skip_tests: bool = False,
        skip_build: bool = False,
    ) -> DeploymentOutcome:
        """Execute the pipeline for one event.

        Args:
            event: Branch push that triggered the run
            skip_tests: Do not run the test suite
            skip_build: Reuse an image already pushed under the reference

        Returns:
            DeploymentOutcome for the run
        """
        tier, namespace, image = self.plan(event)
        logger.info(
            f"Branch {event.branch_name} build {event.build_number} "
            f"({event.commit_ref or 'no commit ref'}) -> {tier.value}/{namespace}"
        )
        if tier == EnvironmentTier.DEV and self.resolver.is_fixed_namespace(namespace):
            return self._failed(
                tier,
                namespace,
                image,
                FailureReason.NAMESPACE_PROVISION_FAILED,
                detail=f"Branch '{event.branch_name}' would deploy dev workloads "
                "into the production namespace",
            )
        if tier == EnvironmentTier.DEV and not is_valid_namespace_name(namespace):
            logger.warning(
                f"Branch name '{namespace}' is not a valid namespace name; "
                "the cluster will likely reject it"
            )

        if not skip_tests and not self.build.run_tests():
            return self._failed(tier, namespace, image, FailureReason.TESTS_FAILED)

        if not skip_build and not self.build.build_and_push_image(image):
            return self._failed(
                tier, namespace, image, FailureReason.IMAGE_BUILD_FAILED
            )

        return self.reconciler.reconcile(tier, namespace, image)

    @staticmethod
    def _failed(
        tier: EnvironmentTier,
        namespace: str,
        image: ImageReference,
        reason: FailureReason,
        detail: str | None = None,
    ) -> DeploymentOutcome:
        logger.error(f"Pipeline stopped: {reason.value}")
        return DeploymentOutcome(
            tier=tier,
            namespace=namespace,
            image_reference=image,
            verified=False,
            failure_reason=reason.value,
            failure_detail=detail or f"Build collaborator reported {reason.value}",
        )
