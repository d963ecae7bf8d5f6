"""Manifest template storage.

Templates live on disk in one directory per tier plus a directory of
service documents shared by every tier::

    k8s/
      services/     frontend + backend Services (shared)
      production/   stable Deployments
      canary/       canary Deployments
      dev/          per-branch Deployments

The store loads them once and hands out ordered, read-only tuples. Services
always come before Deployments because workloads rely on them through
selectors.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from .errors import TemplateError
from .models import Component, DocumentKind, EnvironmentTier, ManifestTemplate

_DOCUMENT_SEPARATOR = re.compile(r"^---\s*$", re.MULTILINE)

_KIND_ORDER = {DocumentKind.SERVICE: 0, DocumentKind.DEPLOYMENT: 1}


class ManifestTemplateStore:
    """Read-only lookup of manifest templates by tier."""

    def __init__(
        self,
        shared_services: Iterable[ManifestTemplate],
        tier_templates: Mapping[EnvironmentTier, Iterable[ManifestTemplate]],
    ) -> None:
        self._shared = _ordered(shared_services)
        self._by_tier = {
            tier: _ordered(tier_templates.get(tier, ())) for tier in EnvironmentTier
        }

    def templates_for(self, tier: EnvironmentTier) -> tuple[ManifestTemplate, ...]:
        """Tier-specific templates, services before deployments."""
        return self._by_tier[tier]

    def shared_service_templates(self) -> tuple[ManifestTemplate, ...]:
        """Service templates applied to every tier."""
        return self._shared

    @classmethod
    def from_directory(
        cls,
        root: Path,
        image_placeholder: str = DEFAULT_CONSTANTS.IMAGE_PLACEHOLDER,
    ) -> ManifestTemplateStore:
        """Load templates from a manifest directory tree.

        Args:
            root: Directory containing services/ and one directory per tier
            image_placeholder: Token marking where the image reference goes

        Returns:
            Populated ManifestTemplateStore

        Raises:
            TemplateError: If the directory is missing or a document is invalid
        """
        if not root.is_dir():
            raise TemplateError(
                f"Manifest directory not found: {root}",
                details="Expected services/, production/, canary/ and dev/ "
                "subdirectories containing YAML documents.",
            )

        shared = _load_dir(
            root / DEFAULT_CONSTANTS.SHARED_SERVICES_DIR, None, image_placeholder
        )
        tiers = {
            tier: _load_dir(root / tier.value, tier, image_placeholder)
            for tier in EnvironmentTier
        }

        logger.info(
            f"Loaded {len(shared)} shared and "
            f"{sum(len(t) for t in tiers.values())} tier templates from {root}"
        )
        return cls(shared, tiers)


def parse_documents(
    text: str,
    tier: EnvironmentTier | None,
    image_placeholder: str,
    source: str = "",
) -> list[ManifestTemplate]:
    """Split a YAML file into templates.

    The placeholder is masked before parsing so authors may write it
    unquoted. Metadata is read from the parsed document; the raw text is
    kept as-is for materialization.
    """
    templates = []
    for raw in _DOCUMENT_SEPARATOR.split(text):
        if not raw.strip():
            continue
        try:
            data = yaml.safe_load(raw.replace(image_placeholder, "image-placeholder"))
        except yaml.YAMLError as e:
            raise TemplateError(f"Invalid YAML in {source or 'manifest'}", str(e)) from e
        if not isinstance(data, dict):
            raise TemplateError(f"Manifest in {source or 'manifest'} is not a mapping")

        kind = _document_kind(data, source)
        name = str((data.get("metadata") or {}).get("name") or "")
        if not name:
            raise TemplateError(f"Manifest in {source or 'manifest'} has no metadata.name")

        templates.append(
            ManifestTemplate(
                tier=tier,
                kind=kind,
                component=_component(data, name, source),
                name=name,
                raw_document=raw.strip("\n") + "\n",
                image_placeholder=image_placeholder
                if kind == DocumentKind.DEPLOYMENT
                else None,
                source=source,
            )
        )
    return templates


def _load_dir(
    directory: Path, tier: EnvironmentTier | None, image_placeholder: str
) -> list[ManifestTemplate]:
    if not directory.is_dir():
        logger.debug(f"No manifest directory at {directory}")
        return []

    templates: list[ManifestTemplate] = []
    for path in sorted(directory.glob("*.y*ml")):
        templates.extend(
            parse_documents(path.read_text(), tier, image_placeholder, str(path))
        )
    return templates


def _document_kind(data: dict[str, Any], source: str) -> DocumentKind:
    kind = str(data.get("kind", "")).lower()
    try:
        return DocumentKind(kind)
    except ValueError:
        raise TemplateError(
            f"Unsupported manifest kind '{data.get('kind')}' in {source or 'manifest'}",
            details="Only Service and Deployment documents are supported.",
        ) from None


def _component(data: dict[str, Any], name: str, source: str) -> Component:
    labels = (data.get("metadata") or {}).get("labels") or {}
    role = str(labels.get("role", "")).lower()
    for component in Component:
        if role == component.value:
            return component
    for component in Component:
        if component.value in name.lower():
            return component
    raise TemplateError(
        f"Cannot tell whether '{name}' in {source or 'manifest'} is frontend or backend",
        details="Set metadata.labels.role to 'frontend' or 'backend'.",
    )


def _ordered(templates: Iterable[ManifestTemplate]) -> tuple[ManifestTemplate, ...]:
    # sorted() is stable, so file order survives within each kind
    return tuple(sorted(templates, key=lambda t: _KIND_ORDER[t.kind]))
