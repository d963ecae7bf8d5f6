"""Kubectl-based implementation of ClusterController.

Uses subprocess calls to kubectl for all operations.
"""

from __future__ import annotations

import asyncio
import json
import subprocess

from loguru import logger

from .controller import ClusterController, CommandResult, RolloutStatus


class KubectlController(ClusterController):
    """Cluster controller using kubectl subprocess calls.

    All methods are async but internally use asyncio.to_thread()
    to run blocking subprocess calls without blocking the event loop.
    """

    def __init__(self, kubectl: str = "kubectl") -> None:
        self.kubectl = kubectl

    async def _run_kubectl(
        self,
        args: list[str],
        *,
        input_data: str | None = None,
    ) -> CommandResult:
        """Run a kubectl command asynchronously.

        Args:
            args: Command arguments (without 'kubectl' prefix)
            input_data: Optional input to send to stdin

        Returns:
            CommandResult with execution results
        """
        cmd = [self.kubectl, *args]
        logger.debug(f"Running: {' '.join(cmd)}")

        def _run() -> CommandResult:
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    input=input_data,
                )
            except OSError as e:
                # 127: not on PATH, 126: found but not runnable
                returncode = 127 if isinstance(e, FileNotFoundError) else 126
                logger.error(f"Could not run {self.kubectl}: {e}")
                return CommandResult(success=False, stderr=str(e), returncode=returncode)
            return CommandResult(
                success=result.returncode == 0,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
                returncode=result.returncode,
            )

        return await asyncio.to_thread(_run)

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    async def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists."""
        result = await self._run_kubectl(["get", "namespace", namespace])
        return result.success

    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace."""
        return await self._run_kubectl(["create", "namespace", namespace])

    # =========================================================================
    # Resource Operations
    # =========================================================================

    async def apply_document(self, namespace: str, document: str) -> CommandResult:
        """Apply a YAML document read from stdin."""
        return await self._run_kubectl(
            ["apply", "--namespace", namespace, "-f", "-"], input_data=document
        )

    # =========================================================================
    # Rollout Operations
    # =========================================================================

    async def get_rollout_status(
        self, namespace: str, workload_name: str
    ) -> RolloutStatus | None:
        """Get replica counts for a Deployment."""
        result = await self._run_kubectl(
            ["get", "deployment", workload_name, "-n", namespace, "-o", "json"]
        )
        if not result.success or not result.stdout:
            return None
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            return None
        return parse_rollout_status(data)

    # =========================================================================
    # Service Operations
    # =========================================================================

    async def get_service_external_ip(
        self, namespace: str, service_name: str
    ) -> str | None:
        """Get the load-balancer ingress IP of a Service."""
        result = await self._run_kubectl(
            [
                "get",
                "service",
                service_name,
                "-n",
                namespace,
                "-o",
                "jsonpath={.status.loadBalancer.ingress[0].ip}",
            ]
        )
        ip = result.stdout.strip() if result.success else ""
        return ip or None


def parse_rollout_status(data: dict) -> RolloutStatus:
    """Build a RolloutStatus from a Deployment object.

    Deployments without spec.replicas default to one replica, matching
    the API server's defaulting. Generations are carried over so a status
    read before the controller sees a fresh apply is not taken as complete.
    """
    metadata = data.get("metadata") or {}
    spec = data.get("spec") or {}
    status = data.get("status") or {}
    updated = status.get("updatedReplicas")
    generation = metadata.get("generation")
    observed = status.get("observedGeneration")
    return RolloutStatus(
        desired_replicas=int(spec.get("replicas", 1)),
        available_replicas=int(status.get("availableReplicas") or 0),
        updated_replicas=int(updated) if updated is not None else None,
        generation=int(generation) if generation is not None else None,
        observed_generation=int(observed) if observed is not None else None,
    )
