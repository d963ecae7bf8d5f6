"""Unit tests for manifest template loading."""

from pathlib import Path

import pytest

from src.core import (
    Component,
    DocumentKind,
    EnvironmentTier,
    ManifestTemplate,
    ManifestTemplateStore,
    TemplateError,
)
from src.core.templates import parse_documents
from tests.fixtures import BACKEND_SERVICE, FRONTEND_SERVICE, deployment_manifest


class TestParseDocuments:
    """Tests for splitting and reading YAML documents."""

    def test_reads_kind_name_and_role(self) -> None:
        [template] = parse_documents(FRONTEND_SERVICE, None, "{{IMAGE}}", "svc.yaml")

        assert template.kind == DocumentKind.SERVICE
        assert template.component == Component.FRONTEND
        assert template.name == "gceme-frontend"
        assert template.tier is None
        assert template.source == "svc.yaml"

    def test_service_has_no_placeholder(self) -> None:
        [template] = parse_documents(BACKEND_SERVICE, None, "{{IMAGE}}")

        assert template.image_placeholder is None
        assert not template.is_workload

    def test_deployment_keeps_raw_text(self) -> None:
        text = deployment_manifest("gceme-backend", "backend", "production")

        [template] = parse_documents(text, EnvironmentTier.PRODUCTION, "{{IMAGE}}")

        assert template.is_workload
        assert template.image_placeholder == "{{IMAGE}}"
        assert template.raw_document == text
        assert '"{{IMAGE}}"' in template.raw_document

    def test_unquoted_placeholder_is_accepted(self) -> None:
        text = deployment_manifest("web", "frontend", "dev").replace(
            '"{{IMAGE}}"', "{{IMAGE}}"
        )

        [template] = parse_documents(text, EnvironmentTier.DEV, "{{IMAGE}}")

        assert template.name == "web"

    def test_multi_document_file(self) -> None:
        text = f"{FRONTEND_SERVICE}---\n{BACKEND_SERVICE}---\n"

        templates = parse_documents(text, None, "{{IMAGE}}")

        assert [t.name for t in templates] == ["gceme-frontend", "gceme-backend"]

    def test_component_falls_back_to_name(self) -> None:
        text = "kind: Service\napiVersion: v1\nmetadata:\n  name: my-backend\n"

        [template] = parse_documents(text, None, "{{IMAGE}}")

        assert template.component == Component.BACKEND

    def test_unknown_component_rejected(self) -> None:
        text = "kind: Service\napiVersion: v1\nmetadata:\n  name: cache\n"

        with pytest.raises(TemplateError, match="frontend or backend"):
            parse_documents(text, None, "{{IMAGE}}")

    def test_unsupported_kind_rejected(self) -> None:
        text = "kind: ConfigMap\napiVersion: v1\nmetadata:\n  name: frontend-config\n"

        with pytest.raises(TemplateError, match="Unsupported manifest kind"):
            parse_documents(text, None, "{{IMAGE}}")

    def test_missing_name_rejected(self) -> None:
        with pytest.raises(TemplateError, match="metadata.name"):
            parse_documents("kind: Service\nmetadata: {}\n", None, "{{IMAGE}}")

    def test_invalid_yaml_rejected(self) -> None:
        with pytest.raises(TemplateError, match="Invalid YAML"):
            parse_documents("kind: [Service\n", None, "{{IMAGE}}")


class TestManifestTemplateStore:
    """Tests for ManifestTemplateStore ordering and loading."""

    def test_loads_every_tier(self, template_store: ManifestTemplateStore) -> None:
        assert [t.name for t in template_store.shared_service_templates()] == [
            "gceme-backend",
            "gceme-frontend",
        ]
        assert [t.name for t in template_store.templates_for(EnvironmentTier.CANARY)] == [
            "gceme-backend-canary",
            "gceme-frontend-canary",
        ]
        assert all(
            t.tier == EnvironmentTier.DEV
            for t in template_store.templates_for(EnvironmentTier.DEV)
        )

    def test_services_come_before_deployments(self) -> None:
        deployment = ManifestTemplate(
            tier=EnvironmentTier.DEV,
            kind=DocumentKind.DEPLOYMENT,
            component=Component.FRONTEND,
            name="web",
            raw_document="",
            image_placeholder="{{IMAGE}}",
        )
        service_a = ManifestTemplate(
            tier=EnvironmentTier.DEV,
            kind=DocumentKind.SERVICE,
            component=Component.FRONTEND,
            name="a",
            raw_document="",
        )
        service_b = ManifestTemplate(
            tier=EnvironmentTier.DEV,
            kind=DocumentKind.SERVICE,
            component=Component.BACKEND,
            name="b",
            raw_document="",
        )

        store = ManifestTemplateStore(
            [], {EnvironmentTier.DEV: [deployment, service_a, service_b]}
        )

        assert store.templates_for(EnvironmentTier.DEV) == (
            service_a,
            service_b,
            deployment,
        )

    def test_order_is_stable_across_calls(
        self, template_store: ManifestTemplateStore
    ) -> None:
        first = template_store.templates_for(EnvironmentTier.PRODUCTION)
        second = template_store.templates_for(EnvironmentTier.PRODUCTION)

        assert first == second

    def test_missing_tier_directory_yields_empty(self, tmp_path: Path) -> None:
        (tmp_path / "services").mkdir()
        (tmp_path / "services" / "frontend.yaml").write_text(FRONTEND_SERVICE)

        store = ManifestTemplateStore.from_directory(tmp_path)

        assert store.templates_for(EnvironmentTier.DEV) == ()
        assert len(store.shared_service_templates()) == 1

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateError, match="not found"):
            ManifestTemplateStore.from_directory(tmp_path / "nope")

    def test_loads_repository_manifests(self) -> None:
        """The manifests shipped with the project parse cleanly."""
        root = Path(__file__).resolve().parents[3] / "k8s"

        store = ManifestTemplateStore.from_directory(root)

        for tier in EnvironmentTier:
            kinds = {t.kind for t in store.templates_for(tier)}
            assert kinds == {DocumentKind.DEPLOYMENT}
        assert {t.component for t in store.shared_service_templates()} == {
            Component.FRONTEND,
            Component.BACKEND,
        }
