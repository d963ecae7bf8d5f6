"""Subprocess execution for the build tools.

The test command, docker and gcloud all run through CommandRunner from the
project root. Long-running tools (image builds, pushes, Cloud Build) stream
their output line by line so CI logs show progress as it happens.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from loguru import logger

from .types import CommandResult


class CommandRunner:
    """Runs external tools and reports a CommandResult.

    A missing executable becomes a failed result with exit code 127, and one
    that cannot be executed gets 126, the same way a shell reports them.

    Attributes:
        project_root: Default working directory
        env: Extra environment variables layered over the process environment
    """

    def __init__(self, project_root: Path, env: Mapping[str, str] | None = None) -> None:
        self.project_root = project_root
        self.env = dict(env or {})

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            cmd: Command and arguments
            cwd: Working directory (defaults to project_root)
            capture_output: Capture stdout/stderr instead of inheriting them

        Returns:
            CommandResult with output and exit code
        """
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            completed = subprocess.run(
                list(cmd),
                cwd=cwd or self.project_root,
                capture_output=capture_output,
                text=True,
                env=self._environment(),
            )
        except OSError as e:
            return _not_runnable(cmd, e)
        return CommandResult(
            success=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )

    def run_streaming(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Run a command, handing each non-empty output line to `on_output`.

        stderr is merged into stdout, so the result's stdout holds the full
        transcript and its stderr is empty.
        """
        logger.debug(f"Streaming: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                list(cmd),
                cwd=cwd or self.project_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
                env=self._environment(),
            )
        except OSError as e:
            return _not_runnable(cmd, e)

        transcript: list[str] = []
        for raw in process.stdout or ():
            line = raw.rstrip()
            if not line:
                continue
            transcript.append(line)
            if on_output:
                on_output(line)
        returncode = process.wait()

        return CommandResult(
            success=returncode == 0,
            stdout="\n".join(transcript),
            returncode=returncode,
        )

    def _environment(self) -> dict[str, str]:
        # Unbuffered so streamed tools flush line by line
        return {**os.environ, **self.env, "PYTHONUNBUFFERED": "1"}


def _not_runnable(cmd: Sequence[str], error: OSError) -> CommandResult:
    if isinstance(error, FileNotFoundError):
        logger.error(f"{cmd[0]} is not installed or not on PATH")
        return CommandResult(success=False, stderr=str(error), returncode=127)
    logger.error(f"{cmd[0]} could not be executed: {error}")
    return CommandResult(success=False, stderr=str(error), returncode=126)
