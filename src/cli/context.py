"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.cli.deployment.shell_commands import ShellCommands
from src.cli.shared.console import CLIConsole, console
from src.infra.constants import DeploymentPaths
from src.infra.k8s import get_cluster_controller_sync
from src.infra.k8s.controller import ClusterControllerSync
from src.runtime.config import ConfigData, load_config_or_default
from src.utils.paths import get_project_root


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    config: ConfigData
    commands: ShellCommands
    cluster: ClusterControllerSync
    paths: DeploymentPaths

    @property
    def manifests_dir(self) -> Path:
        """Absolute path of the manifest template directory."""
        return self.paths.resolve(self.config.manifests.directory)


def build_cli_context(config_path: Path | None = None) -> CLIContext:
    """Build a fresh CLIContext from the config file (or defaults)."""
    project_root = get_project_root()
    paths = DeploymentPaths(project_root)
    if config_path is None and paths.config_yaml.exists():
        config_path = paths.config_yaml
    config = load_config_or_default(config_path)

    return CLIContext(
        console=console,
        project_root=project_root,
        config=config,
        commands=ShellCommands(project_root),
        cluster=get_cluster_controller_sync(config.cluster.backend),
        paths=paths,
    )
