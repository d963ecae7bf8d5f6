"""Console output shared by the CLI commands.

Everything user-facing goes through CLIConsole so the deploy, resolve and
render commands look the same. Loguru handles diagnostics on stderr; this
module handles what a person reading CI output is meant to see.
"""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.table import Table

from src.core.errors import DeploymentError
from src.core.models import DeploymentOutcome


class CLIConsole:
    """Rich console wrapper for deployment output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print(
        self, msg: ConsoleRenderable | str | None = None, *, highlight: bool = True
    ) -> None:
        self.console.print(msg, highlight=highlight)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def print_header(self, title: str, style: str = "blue") -> None:
        """Print a boxed title line."""
        self.console.print(
            Panel.fit(f"[bold {style}]{title}[/bold {style}]", border_style=style)
        )

    def print_outcome(self, outcome: DeploymentOutcome) -> None:
        """Summarize a finished run, with the failure details if it failed."""
        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Tier", outcome.tier.value)
        table.add_row("Namespace", outcome.namespace)
        table.add_row("Image", str(outcome.image_reference))
        table.add_row("Applied", ", ".join(outcome.applied) or "-")
        table.add_row(
            "Verified", "[green]yes[/green]" if outcome.verified else "[red]no[/red]"
        )
        if outcome.failure_reason:
            table.add_row("Failure", f"[red]{outcome.failure_reason}[/red]")

        style = "green" if outcome.succeeded else "red"
        self.console.print(Panel(table, title="Deployment outcome", border_style=style))
        if outcome.failure_detail:
            self.console.print(
                Panel(outcome.failure_detail, title="Details", border_style="red")
            )

    def fail(self, message: str, details: str | None = None, exit_code: int = 1) -> None:
        """Print an error (and its details panel) and exit.

        Raises:
            typer.Exit: Always, with `exit_code`
        """
        self.console.print(f"\n[bold red]❌ {message}[/bold red]\n")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Turn expected failures into a readable message and exit code 1.

    DeploymentError carries its own details panel; bad input (ValueError)
    and OS-level failures such as a missing config file are printed as a
    single line. Ctrl-C exits
    with 130.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except DeploymentError as e:
            console.fail(e.message, e.details)
        except (ValueError, OSError) as e:
            console.fail(str(e))
        except KeyboardInterrupt:
            console.print("\n[dim]Deployment interrupted.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


console = CLIConsole()
