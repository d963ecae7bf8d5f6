"""Deployment wiring for the CLI.

- BranchDeployer: Builds and runs the pipeline for a branch event
- ImageBuilder: Test runner and image builder behind the pipeline
- shell_commands: Abstractions for shell command execution
"""

from .deployer import BranchDeployer
from .image_builder import ImageBuilder

__all__ = ["BranchDeployer", "ImageBuilder"]
