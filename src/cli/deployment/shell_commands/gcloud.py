"""Google Cloud Build command abstractions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class GcloudCommands:
    """gcloud-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def builds_submit(
        self,
        image_tag: str,
        context: str = ".",
        *,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Build remotely with Cloud Build and push the result under `image_tag`."""
        return self._runner.run_streaming(
            ["gcloud", "builds", "submit", "-t", image_tag, context],
            on_output=on_output,
        )
