"""Manifest materialization.

Turns templates into concrete documents. Substitution is a literal string
replace of the image placeholder; no template language is involved. The
only other edit is the dev-tier exposure downgrade on the frontend service,
which keeps per-branch environments off the public internet.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import yaml
from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from .errors import TemplateError
from .models import (
    Component,
    DocumentKind,
    EnvironmentTier,
    ImageReference,
    ManifestTemplate,
    MaterializedManifest,
)


class ManifestMaterializer:
    """Renders manifest templates for a target tier."""

    def __init__(
        self,
        exposure_external: str = DEFAULT_CONSTANTS.EXPOSURE_EXTERNAL,
        exposure_internal: str = DEFAULT_CONSTANTS.EXPOSURE_INTERNAL,
        max_workers: int = 4,
    ) -> None:
        self.exposure_external = exposure_external
        self.exposure_internal = exposure_internal
        self.max_workers = max_workers
        self._exposure_field = re.compile(
            rf"^([ \t]*type:[ \t]*)[\"']?{re.escape(exposure_external)}[\"']?"
            r"([ \t]*(?:#.*)?)$",
            re.MULTILINE,
        )

    def materialize(
        self,
        template: ManifestTemplate,
        image_reference: ImageReference | None,
        *,
        tier: EnvironmentTier | None = None,
    ) -> MaterializedManifest:
        """Render a single template.

        Args:
            template: Template to render
            image_reference: Image to substitute into workload documents
            tier: Target tier; defaults to the template's own tier.
                  Required for shared service templates.

        Returns:
            MaterializedManifest with the rendered document

        Raises:
            TemplateError: If a workload template lacks its placeholder, no
                           tier can be determined, or a dev frontend service
                           cannot be made internal
        """
        target_tier = tier or template.tier
        if target_tier is None:
            raise TemplateError(
                f"No target tier given for shared template '{template.name}'"
            )

        document = template.raw_document
        if template.kind == DocumentKind.DEPLOYMENT:
            document = self._substitute_image(template, image_reference)
        elif (
            target_tier == EnvironmentTier.DEV
            and template.component == Component.FRONTEND
        ):
            document = self._downgrade_exposure(template, document)

        return MaterializedManifest(
            tier=target_tier,
            kind=template.kind,
            component=template.component,
            name=template.name,
            rendered_document=document,
        )

    def materialize_all(
        self,
        templates: Sequence[ManifestTemplate],
        image_reference: ImageReference | None,
        *,
        tier: EnvironmentTier,
    ) -> list[MaterializedManifest]:
        """Render several independent templates concurrently, keeping their order."""
        if len(templates) <= 1:
            return [self.materialize(t, image_reference, tier=tier) for t in templates]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(
                pool.map(
                    lambda t: self.materialize(t, image_reference, tier=tier),
                    templates,
                )
            )

    def _substitute_image(
        self, template: ManifestTemplate, image_reference: ImageReference | None
    ) -> str:
        placeholder = template.image_placeholder
        if not placeholder or placeholder not in template.raw_document:
            token = placeholder or DEFAULT_CONSTANTS.IMAGE_PLACEHOLDER
            raise TemplateError(
                f"Workload template '{template.name}' has no image placeholder",
                details=f"Expected the token {token!r} "
                f"in {template.source or 'the document'}.",
            )
        if image_reference is None:
            raise TemplateError(
                f"No image reference supplied for workload '{template.name}'"
            )
        return template.raw_document.replace(placeholder, str(image_reference))

    def _downgrade_exposure(self, template: ManifestTemplate, document: str) -> str:
        downgraded, count = self._exposure_field.subn(
            rf"\g<1>{self.exposure_internal}\g<2>", document, count=1
        )
        if count:
            logger.debug(f"{template.name}: exposure set to {self.exposure_internal}")
        if _service_type(downgraded) == self.exposure_external:
            raise TemplateError(
                f"Dev service '{template.name}' would stay externally reachable",
                details=f"spec.type is still {self.exposure_external}; write it as "
                f"a block-style `type: {self.exposure_external}` line.",
            )
        return downgraded


def _service_type(document: str) -> str | None:
    data = yaml.safe_load(document)
    if not isinstance(data, dict):
        return None
    spec = data.get("spec")
    return spec.get("type") if isinstance(spec, dict) else None
