"""Deployment reconciliation.

Applies materialized manifests to a target namespace and verifies the
rollout. The sequence for one run is:

1. Dev tier only: ensure the branch namespace exists
2. Materialize and apply the shared services
3. Materialize and apply the tier's workloads with the new image
4. Poll the workloads until they report all desired replicas available,
   or the verification timeout elapses

The first failing step ends the run. Failures come back as a
DeploymentOutcome rather than an exception; nothing is rolled back.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import ClusterControllerSync

from .errors import (
    ApplyError,
    DeploymentError,
    ProvisionError,
    RolloutTimeoutError,
    TemplateError,
)
from .materializer import ManifestMaterializer
from .models import (
    DeploymentOutcome,
    DocumentKind,
    EnvironmentTier,
    FailureReason,
    ImageReference,
    ManifestTemplate,
    MaterializedManifest,
)
from .namespaces import NamespaceProvisioner
from .templates import ManifestTemplateStore

T = TypeVar("T")


class _StepFailed(Exception):
    def __init__(self, reason: FailureReason, error: DeploymentError) -> None:
        self.reason = reason
        self.error = error
        super().__init__(error.message)


class DeploymentReconciler:
    """Applies a tier's manifests to a namespace and verifies the rollout.

    Attributes:
        cluster: Cluster apply primitive
        templates: Template store
        materializer: Template renderer
        provisioner: Namespace provisioner (used for the Dev tier)
        rollout_timeout: Seconds to wait for workloads to become available
        poll_interval: Seconds between rollout status checks
    """

    def __init__(
        self,
        cluster: ClusterControllerSync,
        templates: ManifestTemplateStore,
        materializer: ManifestMaterializer | None = None,
        provisioner: NamespaceProvisioner | None = None,
        *,
        rollout_timeout: float = DEFAULT_CONSTANTS.ROLLOUT_TIMEOUT_SECONDS,
        poll_interval: float = DEFAULT_CONSTANTS.ROLLOUT_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rollout_timeout < 0:
            raise ValueError("rollout_timeout must be non-negative")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

        self.cluster = cluster
        self.templates = templates
        self.materializer = materializer or ManifestMaterializer()
        self.provisioner = provisioner or NamespaceProvisioner(cluster)
        self.rollout_timeout = rollout_timeout
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    def reconcile(
        self,
        tier: EnvironmentTier,
        namespace: str,
        image_reference: ImageReference,
    ) -> DeploymentOutcome:
        """Run one reconciliation.

        Args:
            tier: Target tier
            namespace: Namespace to deploy into
            image_reference: Image the workloads should run

        Returns:
            DeploymentOutcome describing what happened
        """
        applied: list[str] = []
        logger.info(
            f"Reconciling {tier.value} in namespace {namespace} with {image_reference}"
        )

        try:
            if tier == EnvironmentTier.DEV:
                self._step(
                    FailureReason.NAMESPACE_PROVISION_FAILED,
                    lambda: self.provisioner.ensure(namespace),
                )

            services = self._render(
                self.templates.shared_service_templates(), image_reference, tier
            )
            self._apply_all(
                namespace, services, applied, FailureReason.SERVICE_APPLY_FAILED
            )

            manifests = self._render(
                self.templates.templates_for(tier), image_reference, tier
            )
            self._apply_all(
                namespace, manifests, applied, FailureReason.WORKLOAD_APPLY_FAILED
            )

            workloads = [m.name for m in manifests if m.kind == DocumentKind.DEPLOYMENT]
            self._step(
                FailureReason.ROLLOUT_TIMEOUT,
                lambda: self.verify_rollout(namespace, workloads),
            )
        except _StepFailed as failed:
            logger.error(
                f"Reconciliation of {namespace} failed at {failed.reason.value}: "
                f"{failed.error.message}"
            )
            return DeploymentOutcome(
                tier=tier,
                namespace=namespace,
                image_reference=image_reference,
                verified=False,
                failure_reason=failed.reason.value,
                failure_detail=_describe(failed.error),
                applied=tuple(applied),
            )

        logger.info(f"Rollout verified in namespace {namespace}")
        return DeploymentOutcome(
            tier=tier,
            namespace=namespace,
            image_reference=image_reference,
            verified=True,
            applied=tuple(applied),
        )

    def verify_rollout(self, namespace: str, workloads: Sequence[str]) -> None:
        """Wait until every workload reports its desired replicas available.

        Raises:
            RolloutTimeoutError: If the bound elapses first
        """
        pending = list(workloads)
        deadline = self._clock() + self.rollout_timeout

        while True:
            pending = [name for name in pending if not self._is_ready(namespace, name)]
            if not pending:
                return
            if self._clock() >= deadline:
                raise RolloutTimeoutError(
                    f"Rollout did not complete within {self.rollout_timeout:g}s",
                    details=f"Still waiting on: {', '.join(pending)}",
                )
            logger.debug(f"Waiting on {', '.join(pending)} in {namespace}")
            self._sleep(self.poll_interval)

    def _is_ready(self, namespace: str, workload: str) -> bool:
        status = self.cluster.get_rollout_status(namespace, workload)
        return status is not None and status.is_complete

    def _render(
        self,
        templates: Sequence[ManifestTemplate],
        image_reference: ImageReference,
        tier: EnvironmentTier,
    ) -> list[MaterializedManifest]:
        return self._step(
            FailureReason.TEMPLATE_ERROR,
            lambda: self.materializer.materialize_all(
                templates, image_reference, tier=tier
            ),
        )

    def _apply_all(
        self,
        namespace: str,
        manifests: Sequence[MaterializedManifest],
        applied: list[str],
        reason: FailureReason,
    ) -> None:
        for manifest in manifests:
            result = self.cluster.apply_document(namespace, manifest.rendered_document)
            if not result.success:
                raise _StepFailed(
                    reason,
                    ApplyError(
                        f"Cluster rejected {manifest.qualified_name}",
                        details=result.stderr.strip() or None,
                    ),
                )
            logger.debug(f"Applied {manifest.qualified_name} to {namespace}")
            applied.append(manifest.qualified_name)

    @staticmethod
    def _step(reason: FailureReason, action: Callable[[], T]) -> T:
        try:
            return action()
        except (TemplateError, ProvisionError, ApplyError, RolloutTimeoutError) as e:
            raise _StepFailed(reason, e) from e


def _describe(error: DeploymentError) -> str:
    if error.details:
        return f"{error.message}: {error.details}"
    return error.message
