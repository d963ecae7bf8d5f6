import os

# Keep config substitution deterministic regardless of the CI environment
for _var in (
    "REGISTRY_HOST",
    "GCP_PROJECT",
    "CLUSTER_BACKEND",
    "ROLLOUT_TIMEOUT",
    "IMAGE_BUILDER",
    "LOG_LEVEL",
    "BRANCH_DEPLOY_ROOT",
):
    os.environ.pop(_var, None)

from tests.fixtures import *  # noqa: E402,F401,F403
