"""Branch deployment commands.

This module provides the commands CI (or a developer) runs for a branch
push: the full deploy pipeline plus dry-run helpers that show where a
branch would go and what would be applied.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from src.cli.context import CLIContext, build_cli_context
from src.cli.deployment.deployer import BranchDeployer
from src.cli.shared.console import console, with_error_handling
from src.core import BranchEvent, EnvironmentResolver, ImageCoordinates
from src.core.pipeline import plan_event
from src.runtime.logging import setup_logging

# ---------------------------------------------------------------------------
# Shared Options
# ---------------------------------------------------------------------------

BranchOption = Annotated[
    str,
    typer.Option(
        "--branch",
        "-b",
        envvar="BRANCH_NAME",
        help="Branch that was pushed",
    ),
]
BuildNumberOption = Annotated[
    int,
    typer.Option(
        "--build-number",
        "-n",
        envvar="BUILD_NUMBER",
        min=0,
        help="CI build number",
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to config.yaml (default: project root config.yaml)",
    ),
]


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------


def _load_context(config_path: Path | None) -> CLIContext:
    """Build the CLI context and configure logging from it."""
    ctx = build_cli_context(config_path)
    setup_logging(ctx.config.logging.level)
    return ctx


def _planner(ctx: CLIContext) -> tuple[ImageCoordinates, EnvironmentResolver]:
    """Image coordinates and resolver from configuration, no templates needed."""
    config = ctx.config
    coordinates = ImageCoordinates(
        registry_host=config.registry.host,
        project_id=config.registry.project_id,
        app_name=config.app_name,
    )
    resolver = EnvironmentResolver(
        production_namespace=config.cluster.production_namespace
    )
    return coordinates, resolver


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@with_error_handling
def deploy(
    branch: BranchOption,
    build_number: BuildNumberOption,
    commit: Annotated[
        str,
        typer.Option(
            "--commit",
            envvar="GIT_COMMIT",
            help="Commit that triggered the build",
        ),
    ] = "",
    config: ConfigOption = None,
    skip_tests: Annotated[
        bool,
        typer.Option(
            "--skip-tests",
            help="Do not run the test command",
        ),
    ] = False,
    skip_build: Annotated[
        bool,
        typer.Option(
            "--skip-build",
            help="Deploy an image already pushed under this branch/build",
        ),
    ] = False,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            "-t",
            min=0,
            help="Rollout verification timeout in seconds",
        ),
    ] = None,
) -> None:
    """Test, build, push and deploy a branch build.

    The branch decides the target:
    - main/master: production namespace
    - canary: canary deployments in the production namespace
    - anything else: its own namespace named after the branch

    Examples:
        branch-deploy deploy --branch feature-x --build-number 7
        BRANCH_NAME=canary BUILD_NUMBER=12 branch-deploy deploy
        branch-deploy deploy -b main -n 40 --skip-tests --timeout 600
    """
    ctx = _load_context(config)
    deployer = BranchDeployer(ctx)
    outcome = deployer.deploy(
        BranchEvent(branch_name=branch, build_number=build_number, commit_ref=commit),
        skip_tests=skip_tests,
        skip_build=skip_build,
        rollout_timeout=timeout,
    )
    if not outcome.succeeded:
        raise typer.Exit(1)


@with_error_handling
def resolve(
    branch: Annotated[str, typer.Argument(help="Branch name")],
    config: ConfigOption = None,
) -> None:
    """Show the tier and namespace a branch deploys to."""
    ctx = _load_context(config)
    _, resolver = _planner(ctx)
    tier, namespace = resolver.resolve(branch)

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Branch", branch)
    table.add_row("Tier", tier.value)
    table.add_row("Namespace", namespace)
    console.print(table)


@with_error_handling
def image_ref(
    branch: BranchOption,
    build_number: BuildNumberOption,
    config: ConfigOption = None,
) -> None:
    """Print the image reference a branch build is pushed under."""
    ctx = _load_context(config)
    coordinates, resolver = _planner(ctx)
    _, _, image = plan_event(
        BranchEvent(branch_name=branch, build_number=build_number),
        coordinates,
        resolver,
    )
    typer.echo(str(image))


@with_error_handling
def render(
    branch: BranchOption,
    build_number: BuildNumberOption,
    config: ConfigOption = None,
) -> None:
    """Print every manifest a deploy would apply, without touching the cluster.

    Output is a multi-document YAML stream suitable for `kubectl apply -f -`
    (with `--namespace` set to the resolved namespace).
    """
    ctx = _load_context(config)
    documents = BranchDeployer(ctx).render(
        BranchEvent(branch_name=branch, build_number=build_number)
    )
    typer.echo("---\n".join(d.rendered_document for d in documents), nl=False)
