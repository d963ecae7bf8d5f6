"""Unit tests for the kubectl-backed cluster controller."""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from src.infra.k8s import (
    ClusterControllerSync,
    CommandResult,
    KubectlController,
    RolloutStatus,
    get_cluster_controller,
    run_sync,
)
from src.infra.k8s.kubectl_controller import parse_rollout_status


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock(spec=subprocess.CompletedProcess)
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestKubectlController:
    """Tests for the kubectl command lines and result parsing."""

    @pytest.fixture
    def controller(self) -> ClusterControllerSync:
        return ClusterControllerSync(KubectlController())

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_apply_pipes_document_to_stdin(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.return_value = _completed(stdout="deployment.apps/web configured")

        result = controller.apply_document("feature-x", "kind: Deployment\n")

        assert result.success
        args, kwargs = mock_run.call_args
        assert args[0] == ["kubectl", "apply", "--namespace", "feature-x", "-f", "-"]
        assert kwargs["input"] == "kind: Deployment\n"

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_create_namespace_reports_already_exists(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.return_value = _completed(
            returncode=1,
            stderr='Error from server (AlreadyExists): namespaces "feature-x" already exists',
        )

        result = controller.create_namespace("feature-x")

        assert not result.success
        assert "AlreadyExists" in result.stderr
        assert mock_run.call_args[0][0] == ["kubectl", "create", "namespace", "feature-x"]

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_namespace_exists(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.side_effect = [_completed(0), _completed(1)]

        assert controller.namespace_exists("production") is True
        assert controller.namespace_exists("missing") is False

    @patch(
        "src.infra.k8s.kubectl_controller.subprocess.run",
        side_effect=PermissionError(13, "Permission denied"),
    )
    def test_non_executable_kubectl_is_a_failed_result(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        result = controller.apply_document("feature-x", "kind: Service\n")

        assert not result.success
        assert result.returncode == 126
        assert "Permission denied" in result.stderr

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_rollout_status_from_deployment_json(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.return_value = _completed(
            stdout=json.dumps(
                {
                    "spec": {"replicas": 3},
                    "status": {"availableReplicas": 2, "updatedReplicas": 3},
                }
            )
        )

        status = controller.get_rollout_status("production", "gceme-frontend")

        assert status == RolloutStatus(
            desired_replicas=3, available_replicas=2, updated_replicas=3
        )
        assert not status.is_complete

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_rollout_status_missing_deployment(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.return_value = _completed(returncode=1, stderr="NotFound")

        assert controller.get_rollout_status("production", "nope") is None

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_rollout_status_bad_json(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.return_value = _completed(stdout="not json")

        assert controller.get_rollout_status("production", "web") is None

    @patch("src.infra.k8s.kubectl_controller.subprocess.run")
    def test_external_ip(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        mock_run.side_effect = [_completed(stdout="35.1.2.3\n"), _completed(stdout="")]

        assert controller.get_service_external_ip("production", "gceme-frontend") == "35.1.2.3"
        assert controller.get_service_external_ip("production", "gceme-frontend") is None

    @patch(
        "src.infra.k8s.kubectl_controller.subprocess.run",
        side_effect=FileNotFoundError("kubectl"),
    )
    def test_missing_binary(
        self, mock_run: MagicMock, controller: ClusterControllerSync
    ) -> None:
        result = controller.apply_document("production", "kind: Service\n")

        assert result == CommandResult(success=False, stderr="kubectl", returncode=127)


class TestParseRolloutStatus:
    """Tests for parse_rollout_status."""

    def test_defaults_to_one_replica(self) -> None:
        status = parse_rollout_status({"status": {"availableReplicas": 1}})

        assert status.desired_replicas == 1
        assert status.updated_replicas is None
        assert status.is_complete

    def test_empty_status(self) -> None:
        status = parse_rollout_status({"spec": {"replicas": 2}})

        assert status.available_replicas == 0
        assert not status.is_complete

    def test_stale_replicas_not_complete(self) -> None:
        status = RolloutStatus(desired_replicas=2, available_replicas=2, updated_replicas=1)

        assert not status.is_complete

    def test_unobserved_generation_not_complete(self) -> None:
        status = parse_rollout_status(
            {
                "metadata": {"generation": 2},
                "spec": {"replicas": 2},
                "status": {
                    "observedGeneration": 1,
                    "availableReplicas": 2,
                    "updatedReplicas": 2,
                },
            }
        )

        assert (status.generation, status.observed_generation) == (2, 1)
        assert not status.is_complete

    def test_observed_generation_complete(self) -> None:
        status = parse_rollout_status(
            {
                "metadata": {"generation": 2},
                "spec": {"replicas": 2},
                "status": {"observedGeneration": 2, "availableReplicas": 2},
            }
        )

        assert status.is_complete

    def test_new_deployment_without_observed_generation(self) -> None:
        status = RolloutStatus(desired_replicas=0, generation=1)

        assert not status.is_complete


class TestHelpers:
    """Tests for controller factories and run_sync."""

    def test_kubectl_backend(self) -> None:
        assert isinstance(get_cluster_controller("kubectl"), KubectlController)

    def test_controller_is_cached(self) -> None:
        assert get_cluster_controller("kubectl") is get_cluster_controller("kubectl")

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="Unknown cluster backend"):
            get_cluster_controller("helm")

    def test_run_sync_without_loop(self) -> None:
        async def _value() -> int:
            return 42

        assert run_sync(_value()) == 42

    def test_run_sync_inside_running_loop(self) -> None:
        import asyncio

        async def _inner() -> str:
            return "done"

        async def _outer() -> str:
            return run_sync(_inner())

        assert asyncio.run(_outer()) == "done"
