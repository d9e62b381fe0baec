"""Console logging helpers built on Rich.

All progress output goes to stderr so stdout stays free for anything a
caller wants to pipe.
"""

from rich.console import Console

_console = Console(stderr=True, highlight=False)


def get_console() -> Console:
    """Return the shared stderr console.

    Returns
    -------
    Console
        Rich console used for all log output.

    """
    return _console


def log_info(message: str) -> None:
    """Log an informational message."""
    _console.print(f"[cyan]ℹ[/cyan] {message}")


def log_success(message: str) -> None:
    """Log a success message."""
    _console.print(f"[green]✓[/green] {message}")


def log_warning(message: str) -> None:
    """Log a warning message."""
    _console.print(f"[yellow]⚠[/yellow] {message}")


def log_error(message: str) -> None:
    """Log an error message."""
    _console.print(f"[red]✗[/red] {message}")
