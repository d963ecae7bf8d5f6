"""Shared test fixtures and test doubles."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest
import yaml

from src.core import (
    EnvironmentTier,
    ImageReference,
    ManifestTemplateStore,
)
from src.infra.k8s.controller import (
    ClusterController,
    ClusterControllerSync,
    CommandResult,
    RolloutStatus,
)

__all__ = [
    "FakeClock",
    "FakeClusterController",
    "FRONTEND_SERVICE",
    "BACKEND_SERVICE",
    "deployment_manifest",
    "write_manifest_tree",
    "fake_controller",
    "cluster",
    "fake_clock",
    "manifest_dir",
    "template_store",
    "feature_image",
]


# =============================================================================
# Manifest text
# =============================================================================

FRONTEND_SERVICE = """\
kind: Service
apiVersion: v1
metadata:
  name: gceme-frontend
  labels:
    app: gceme
    role: frontend
spec:
  type: LoadBalancer
  ports:
  - name: http
    port: 80
    targetPort: 80
  selector:
    app: gceme
    role: frontend
"""

BACKEND_SERVICE = """\
kind: Service
apiVersion: v1
metadata:
  name: gceme-backend
  labels:
    app: gceme
    role: backend
spec:
  ports:
  - name: http
    port: 8080
    targetPort: 8080
  selector:
    app: gceme
    role: backend
"""


def deployment_manifest(name: str, role: str, env: str, replicas: int = 1) -> str:
    """Deployment document with a quoted image placeholder."""
    return f"""\
kind: Deployment
apiVersion: apps/v1
metadata:
  name: {name}
  labels:
    app: gceme
    role: {role}
    env: {env}
spec:
  replicas: {replicas}
  selector:
    matchLabels:
      app: gceme
      role: {role}
      env: {env}
  template:
    metadata:
      labels:
        app: gceme
        role: {role}
        env: {env}
    spec:
      containers:
      - name: {role}
        image: "{{{{IMAGE}}}}"
"""


_DEPLOYMENT_SUFFIX = {
    EnvironmentTier.PRODUCTION: "",
    EnvironmentTier.CANARY: "-canary",
    EnvironmentTier.DEV: "-dev",
}


def write_manifest_tree(root: Path) -> Path:
    """Write services/ plus one directory per tier with frontend and backend."""
    services = root / "services"
    services.mkdir(parents=True)
    (services / "backend.yaml").write_text(BACKEND_SERVICE)
    (services / "frontend.yaml").write_text(FRONTEND_SERVICE)

    for tier, suffix in _DEPLOYMENT_SUFFIX.items():
        tier_dir = root / tier.value
        tier_dir.mkdir()
        for role in ("backend", "frontend"):
            (tier_dir / f"{role}.yaml").write_text(
                deployment_manifest(f"gceme-{role}{suffix}", role, tier.value)
            )
    return root


# =============================================================================
# Test doubles
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock; sleeping advances it."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeClusterController(ClusterController):
    """In-memory cluster.

    Applying an unchanged document is a no-op and a changed one counts as an
    update. Applied Deployments report all replicas available unless their
    name is in `stalled`.
    """

    def __init__(self, namespaces: set[str] | None = None) -> None:
        self._lock = threading.Lock()
        self.namespaces: set[str] = set(namespaces or {"default", "production"})
        self.objects: dict[tuple[str, str], str] = {}
        self.apply_calls: list[tuple[str, str]] = []
        self.updates: list[tuple[str, str]] = []
        self.namespace_creations = 0
        self.replicas: dict[tuple[str, str], int] = {}

        self.stalled: set[str] = set()
        self.reject_apply: dict[str, str] = {}
        self.reject_namespace: dict[str, str] = {}
        self.external_ips: dict[tuple[str, str], str] = {}
        self.exists_barrier: threading.Barrier | None = None

    async def namespace_exists(self, namespace: str) -> bool:
        with self._lock:
            exists = namespace in self.namespaces
        if self.exists_barrier is not None:
            self.exists_barrier.wait(timeout=5)
        return exists

    async def create_namespace(self, namespace: str) -> CommandResult:
        if namespace in self.reject_namespace:
            return CommandResult(
                success=False, stderr=self.reject_namespace[namespace], returncode=1
            )
        with self._lock:
            if namespace in self.namespaces:
                return CommandResult(
                    success=False,
                    stderr=f'Error from server (AlreadyExists): namespaces "{namespace}" already exists',
                    returncode=1,
                )
            self.namespaces.add(namespace)
            self.namespace_creations += 1
        return CommandResult(success=True, stdout=f"namespace/{namespace} created")

    async def apply_document(self, namespace: str, document: str) -> CommandResult:
        data = yaml.safe_load(document)
        kind = data["kind"].lower()
        name = data["metadata"]["name"]
        key = (namespace, f"{kind}/{name}")

        with self._lock:
            self.apply_calls.append(key)
            if namespace not in self.namespaces:
                return CommandResult(
                    success=False,
                    stderr=f'namespaces "{namespace}" not found',
                    returncode=1,
                )
            if name in self.reject_apply:
                return CommandResult(
                    success=False, stderr=self.reject_apply[name], returncode=1
                )
            previous = self.objects.get(key)
            if previous is not None and previous != document:
                self.updates.append(key)
            self.objects[key] = document
            if kind == "deployment":
                self.replicas[(namespace, name)] = int(
                    (data.get("spec") or {}).get("replicas", 1)
                )
        return CommandResult(success=True, stdout=f"{kind}/{name} configured")

    async def get_rollout_status(
        self, namespace: str, workload_name: str
    ) -> RolloutStatus | None:
        with self._lock:
            desired = self.replicas.get((namespace, workload_name))
        if desired is None:
            return None
        available = 0 if workload_name in self.stalled else desired
        return RolloutStatus(
            desired_replicas=desired,
            available_replicas=available,
            updated_replicas=available,
        )

    async def get_service_external_ip(
        self, namespace: str, service_name: str
    ) -> str | None:
        return self.external_ips.get((namespace, service_name))

    # Helpers for assertions

    def documents_in(self, namespace: str) -> dict[str, str]:
        """Applied documents in a namespace keyed by kind/name."""
        return {
            name: doc for (ns, name), doc in self.objects.items() if ns == namespace
        }


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_controller() -> FakeClusterController:
    """In-memory cluster with default and production namespaces."""
    return FakeClusterController()


@pytest.fixture
def cluster(fake_controller: FakeClusterController) -> ClusterControllerSync:
    """Synchronous facade over the fake cluster."""
    return ClusterControllerSync(fake_controller)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manifest_dir(tmp_path: Path) -> Path:
    """Manifest tree with shared services and every tier populated."""
    return write_manifest_tree(tmp_path / "k8s")


@pytest.fixture
def template_store(manifest_dir: Path) -> ManifestTemplateStore:
    return ManifestTemplateStore.from_directory(manifest_dir)


@pytest.fixture
def feature_image() -> ImageReference:
    """Image reference for build 7 of branch feature-x."""
    return ImageReference(
        registry_host="gcr.io",
        project_id="proj",
        app_name="gceme",
        branch_name="feature-x",
        build_number=7,
    )
