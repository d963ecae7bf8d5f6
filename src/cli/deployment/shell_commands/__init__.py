"""Build tool commands used before a deployment.

- runner: subprocess execution (the test command runs through it directly)
- docker: local image build and push
- gcloud: remote build with Cloud Build, which pushes on success

Usage:
    commands = ShellCommands(project_root=Path("."))
    if commands.docker.build_image("gcr.io/proj/gceme:main.3").success:
        commands.docker.push_image("gcr.io/proj/gceme:main.3")
"""

from pathlib import Path

from .docker import DockerCommands
from .gcloud import GcloudCommands
from .runner import CommandRunner
from .types import CommandResult


class ShellCommands:
    """The build tools, bound to one project checkout."""

    def __init__(self, project_root: Path) -> None:
        self._project_root = Path(project_root)
        self.runner = CommandRunner(self._project_root)
        self.docker = DockerCommands(self.runner)
        self.gcloud = GcloudCommands(self.runner)

    @property
    def project_root(self) -> Path:
        """Directory every command runs from."""
        return self._project_root


__all__ = [
    "ShellCommands",
    "CommandRunner",
    "CommandResult",
    "DockerCommands",
    "GcloudCommands",
]
