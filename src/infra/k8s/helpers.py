from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from src.infra.k8s.controller import ClusterController, ClusterControllerSync

SUPPORTED_BACKENDS = ("kubectl", "kr8s")


@lru_cache(maxsize=2)
def get_cluster_controller(backend: str = "kubectl") -> ClusterController:
    """Get a ClusterController for the configured backend.

    Args:
        backend: "kubectl" (subprocess) or "kr8s" (native async client)

    Returns:
        An instance of ClusterController

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == "kubectl":
        from src.infra.k8s.kubectl_controller import KubectlController

        return KubectlController()
    if backend == "kr8s":
        from src.infra.k8s.kr8s_controller import Kr8sController

        return Kr8sController()
    raise ValueError(
        f"Unknown cluster backend '{backend}' "
        f"(expected one of {', '.join(SUPPORTED_BACKENDS)})"
    )


def get_cluster_controller_sync(backend: str = "kubectl") -> ClusterControllerSync:
    """Get a synchronous wrapper for the configured ClusterController."""
    return ClusterControllerSync(get_cluster_controller(backend))
