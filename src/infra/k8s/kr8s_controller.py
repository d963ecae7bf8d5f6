"""Kr8s-based implementation of ClusterController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

from typing import Any

import kr8s
from kr8s.asyncio.objects import Deployment, Namespace, Service
from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from .controller import ClusterController, CommandResult, RolloutStatus
from .kubectl_controller import KubectlController, parse_rollout_status


class Kr8sController(ClusterController):
    """Cluster controller using kr8s library.

    All methods are natively async, leveraging kr8s's async API.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. When using run_sync() which calls asyncio.run(),
    each call creates a new event loop, making the cached API unusable.
    """

    def __init__(self, kubectl: str = "kubectl") -> None:
        self._kubectl = KubectlController(kubectl)

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the running event loop."""
        return await kr8s.asyncio.api()

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    async def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists."""
        try:
            api = await self._get_api()
            ns = await Namespace.get(namespace, api=api)
            return ns is not None
        except kr8s.NotFoundError:
            return False
        except Exception as e:
            logger.warning(f"Could not look up namespace {namespace}: {e}")
            return False

    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace, reporting conflicts as AlreadyExists."""
        try:
            api = await self._get_api()
            ns = Namespace(
                {
                    "apiVersion": "v1",
                    "kind": "Namespace",
                    "metadata": {"name": namespace},
                },
                api=api,
            )
            await ns.create()
            return CommandResult(success=True, stdout=f"namespace/{namespace} created")
        except kr8s.ServerError as e:
            if _is_conflict(e):
                return CommandResult(
                    success=False,
                    stderr=f"{DEFAULT_CONSTANTS.ALREADY_EXISTS_MARKER}: "
                    f'namespace "{namespace}" already exists',
                    returncode=1,
                )
            return CommandResult(success=False, stderr=str(e), returncode=1)
        except Exception as e:
            return CommandResult(success=False, stderr=str(e), returncode=1)

    # =========================================================================
    # Resource Operations
    # =========================================================================

    async def apply_document(self, namespace: str, document: str) -> CommandResult:
        """Apply a YAML document.

        Note: kr8s doesn't have a direct 'apply' equivalent, so this goes
        through the kubectl backend.
        """
        return await self._kubectl.apply_document(namespace, document)

    # =========================================================================
    # Rollout Operations
    # =========================================================================

    async def get_rollout_status(
        self, namespace: str, workload_name: str
    ) -> RolloutStatus | None:
        """Get replica counts for a Deployment."""
        try:
            api = await self._get_api()
            deployment = await Deployment.get(workload_name, namespace=namespace, api=api)
            return parse_rollout_status(deployment.raw)
        except kr8s.NotFoundError:
            return None
        except Exception as e:
            logger.warning(f"Could not read deployment {namespace}/{workload_name}: {e}")
            return None

    # =========================================================================
    # Service Operations
    # =========================================================================

    async def get_service_external_ip(
        self, namespace: str, service_name: str
    ) -> str | None:
        """Get the load-balancer ingress IP of a Service."""
        try:
            api = await self._get_api()
            service = await Service.get(service_name, namespace=namespace, api=api)
        except Exception:
            return None
        ingress = (
            (service.raw.get("status") or {}).get("loadBalancer", {}).get("ingress")
            or []
        )
        if not ingress:
            return None
        return ingress[0].get("ip") or ingress[0].get("hostname")


def _is_conflict(error: kr8s.ServerError) -> bool:
    response = getattr(error, "response", None)
    if response is not None and getattr(response, "status_code", None) == 409:
        return True
    return DEFAULT_CONSTANTS.ALREADY_EXISTS_MARKER in str(error)
