"""Branch deployer.

Wires the deployment core to the CLI: builds the pipeline from
configuration, runs it with console output, and reports the outcome along
with how to reach the deployed frontend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from src.core import (
    BranchEvent,
    Component,
    DeploymentOutcome,
    DeploymentPipeline,
    DeploymentReconciler,
    EnvironmentResolver,
    EnvironmentTier,
    ImageCoordinates,
    ImageReference,
    ManifestMaterializer,
    ManifestTemplateStore,
    MaterializedManifest,
    NamespaceProvisioner,
)
from src.core.pipeline import plan_event
from src.infra.constants import DEFAULT_CONSTANTS

from .image_builder import ImageBuilder

if TYPE_CHECKING:
    from ..context import CLIContext


class BranchDeployer:
    """Deploys a branch build to the environment its branch maps to.

    Attributes:
        ctx: CLI runtime dependencies
        templates: Manifest templates loaded from the configured directory
        resolver: Branch to tier/namespace resolver
        materializer: Template renderer
    """

    def __init__(self, ctx: CLIContext) -> None:
        self.ctx = ctx
        self.console = ctx.console
        config = ctx.config

        self.templates = ManifestTemplateStore.from_directory(
            ctx.manifests_dir, config.manifests.image_placeholder
        )
        self.resolver = EnvironmentResolver(
            production_namespace=config.cluster.production_namespace
        )
        self.materializer = ManifestMaterializer()
        self.coordinates = ImageCoordinates(
            registry_host=config.registry.host,
            project_id=config.registry.project_id,
            app_name=config.app_name,
        )

    # =========================================================================
    # Pipeline Construction
    # =========================================================================

    def build_pipeline(self, rollout_timeout: float | None = None) -> DeploymentPipeline:
        """Assemble the pipeline for one run."""
        config = self.ctx.config
        provisioner = NamespaceProvisioner(
            self.ctx.cluster,
            fixed_namespaces=frozenset({config.cluster.production_namespace}),
        )
        reconciler = DeploymentReconciler(
            self.ctx.cluster,
            self.templates,
            self.materializer,
            provisioner,
            rollout_timeout=rollout_timeout
            if rollout_timeout is not None
            else config.rollout.timeout_seconds,
            poll_interval=config.rollout.poll_interval_seconds,
        )
        build = ImageBuilder(
            self.ctx.commands,
            self.console,
            builder=config.build.builder,
            test_command=config.build.test_command,
            context=config.build.context,
        )
        return DeploymentPipeline(self.coordinates, build, reconciler, self.resolver)

    # =========================================================================
    # Public Interface
    # =========================================================================

    def deploy(
        self,
        event: BranchEvent,
        *,
        skip_tests: bool = False,
        skip_build: bool = False,
        rollout_timeout: float | None = None,
    ) -> DeploymentOutcome:
        """Run the full pipeline for a branch event and display the result."""
        pipeline = self.build_pipeline(rollout_timeout)
        tier, namespace, image = pipeline.plan(event)

        self.console.print_header(
            f"Deploying {event.branch_name} → {tier.value} ({namespace})"
        )
        self.console.info(f"Image: {image}")

        outcome = pipeline.run(event, skip_tests=skip_tests, skip_build=skip_build)
        self.show_outcome(outcome)
        if outcome.succeeded:
            self.show_access_hint(outcome)
        return outcome

    def plan(self, event: BranchEvent) -> tuple[EnvironmentTier, str, ImageReference]:
        """Resolve tier, namespace and image for an event."""
        return plan_event(event, self.coordinates, self.resolver)

    def render(self, event: BranchEvent) -> list[MaterializedManifest]:
        """Materialize every document the event would apply.

        Nothing is sent to the cluster.
        """
        tier, _, image = self.plan(event)
        documents = self.materializer.materialize_all(
            self.templates.shared_service_templates(), image, tier=tier
        )
        documents.extend(
            self.materializer.materialize_all(
                self.templates.templates_for(tier), image, tier=tier
            )
        )
        return documents

    # =========================================================================
    # Display
    # =========================================================================

    def show_outcome(self, outcome: DeploymentOutcome) -> None:
        """Print a summary of a finished run."""
        self.console.print_outcome(outcome)

    def show_access_hint(self, outcome: DeploymentOutcome) -> None:
        """Tell the user how to reach the frontend in the target environment."""
        frontend = next(
            (
                t.name
                for t in self.templates.shared_service_templates()
                if t.component == Component.FRONTEND
            ),
            None,
        )
        if frontend is None:
            return

        if outcome.tier == EnvironmentTier.DEV:
            port = DEFAULT_CONSTANTS.KUBECTL_PROXY_PORT
            self.console.info(
                "Dev environments are internal only. Run `kubectl proxy`, then open:"
            )
            self.console.print(
                f"  http://localhost:{port}/api/v1/namespaces/{outcome.namespace}"
                f"/services/{frontend}:80/proxy/"
            )
            return

        ip = self.ctx.cluster.get_service_external_ip(outcome.namespace, frontend)
        if ip:
            self.console.info(f"Frontend available at http://{ip}/")
        else:
            logger.debug(f"No external IP yet for service {frontend}")
            self.console.info(
                f"External IP for {frontend} is still pending; check "
                f"`kubectl -n {outcome.namespace} get service {frontend}`"
            )
