"""Main CLI application module.

This module provides the main entry point for the branch-deploy CLI.
Every command takes the branch and build number from options or from the
CI environment (BRANCH_NAME, BUILD_NUMBER, GIT_COMMIT).
"""

import typer

from .commands import deploy, image_ref, render, resolve

# Create the main CLI application
app = typer.Typer(
    help="🚀 Branch Deploy - Continuous delivery from branch to environment",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("deploy")(deploy)
app.command("resolve")(resolve)
app.command("render")(render)
app.command("image-ref")(image_ref)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
