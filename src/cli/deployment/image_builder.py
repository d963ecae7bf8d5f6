"""Test execution and image building for branch deployments.

Implements the pipeline's BuildCollaborator on top of shell commands:
- Running the project's test command
- Building the image locally with Docker and pushing it, or
- Submitting the build to Cloud Build, which pushes on success
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from src.core.errors import BuildError
from src.core.models import ImageReference
from src.core.pipeline import BuildCollaborator

if TYPE_CHECKING:
    from src.cli.shared.console import CLIConsole

    from .shell_commands import ShellCommands

SUPPORTED_BUILDERS = ("docker", "cloudbuild")


class ImageBuilder(BuildCollaborator):
    """Runs tests and produces the deployment image.

    Attributes:
        commands: Shell command executor
        console: CLI console for output
        builder: "docker" or "cloudbuild"
        test_command: Command that runs the test suite
        context: Build context directory
    """

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        *,
        builder: str = "docker",
        test_command: list[str] | None = None,
        context: str = ".",
    ) -> None:
        """Initialize the image builder.

        Raises:
            BuildError: If the builder is not supported
        """
        if builder not in SUPPORTED_BUILDERS:
            raise BuildError(
                f"Unsupported image builder '{builder}'",
                details=f"Supported builders: {', '.join(SUPPORTED_BUILDERS)}",
            )
        self.commands = commands
        self.console = console
        self.builder = builder
        self.test_command = test_command or []
        self.context = context

    def run_tests(self) -> bool:
        """Run the configured test command; an empty command counts as passing."""
        if not self.test_command:
            self.console.print("[dim]No test command configured, skipping tests[/dim]")
            return True

        self.console.print(
            f"[bold cyan]🧪 Running tests: {' '.join(self.test_command)}[/bold cyan]"
        )
        result = self.commands.runner.run(self.test_command, capture_output=False)
        if not result.success:
            logger.error(f"Tests failed with exit code {result.returncode}")
            self.console.print("[red]✗ Tests failed[/red]")
            return False

        self.console.print("[green]✓ Tests passed[/green]")
        return True

    def build_and_push_image(self, image_reference: ImageReference) -> bool:
        """Build the image and push it under `image_reference`."""
        image = str(image_reference)
        self.console.print(f"[bold cyan]🔨 Building image {image}...[/bold cyan]")

        if self.builder == "cloudbuild":
            result = self.commands.gcloud.builds_submit(
                image, self.context, on_output=self._echo
            )
            return self._report(result.success, "Cloud Build", image)

        if self.commands.docker.image_exists(image):
            self.console.print(
                f"[yellow]✓ Image {image} already exists locally, skipping build[/yellow]"
            )
        else:
            result = self.commands.docker.build_image(
                image, self.context, on_output=self._echo
            )
            if not self._report(result.success, "Build", image):
                return False

        result = self.commands.docker.push_image(image, on_output=self._echo)
        return self._report(result.success, "Push", image)

    def _report(self, success: bool, step: str, image: str) -> bool:
        if success:
            self.console.print(f"[green]✓ {step} succeeded: {image}[/green]")
        else:
            logger.error(f"{step} failed for {image}")
            self.console.print(f"[red]✗ {step} failed for {image}[/red]")
        return success

    def _echo(self, line: str) -> None:
        self.console.print(f"[dim]{line}[/dim]", highlight=False)
