import os
from pathlib import Path

# Files that mark the root of a deployable project
ROOT_MARKERS = ("config.yaml", "pyproject.toml")


def get_project_root(start: Path | None = None) -> Path:
    """Locate the project whose manifests and config.yaml should be used.

    BRANCH_DEPLOY_ROOT wins when set. Otherwise the search walks up from
    `start` (default: the working directory, which is the checkout in CI)
    and then from this module, stopping at the first directory holding one
    of ROOT_MARKERS.

    Returns:
        Project root, or the working directory if nothing matches
    """
    override = os.environ.get("BRANCH_DEPLOY_ROOT")
    if override:
        return Path(override).resolve()

    cwd = (start or Path.cwd()).resolve()
    for origin in (cwd, Path(__file__).resolve().parent):
        for directory in (origin, *origin.parents):
            if any((directory / marker).exists() for marker in ROOT_MARKERS):
                return directory
    return cwd
