"""Local docker builds of the deployable image.

Builds stream through the runner; a pushed tag is what the cluster pulls.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class DockerCommands:
    """Docker-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Docker commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def image_exists(self, image_tag: str) -> bool:
        """Check if a Docker image with the given tag exists locally.

        Example:
            >>> docker.image_exists("gcr.io/proj/gceme:main.12")
            True
        """
        result = self._runner.run(["docker", "images", "-q", image_tag])
        return bool(result.stdout.strip())

    def build_image(
        self,
        image_tag: str,
        context: str = ".",
        *,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Build an image from a Dockerfile in the build context.

        Args:
            image_tag: Full image reference to tag the build with
            context: Build context directory (relative to project root)
            on_output: Optional callback receiving build output lines

        Returns:
            CommandResult with build status
        """
        return self._runner.run_streaming(
            ["docker", "build", "-t", image_tag, context], on_output=on_output
        )

    def push_image(
        self,
        image_tag: str,
        *,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Push a Docker image to its registry.

        Args:
            image_tag: Full image reference including registry
            on_output: Optional callback receiving push output lines

        Returns:
            CommandResult with push status
        """
        return self._runner.run_streaming(
            ["docker", "push", image_tag], on_output=on_output
        )
