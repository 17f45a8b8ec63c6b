"""Clean error display for module resolution errors."""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..module_resolution.errors import InvalidPathError
from ..module_resolution.errors import ModuleLoadError
from ..module_resolution.errors import ModuleNotFoundError
from ..module_resolution.errors import ResolutionError
from ..module_resolution.errors import UnsupportedTypeError

# ---- Maximum message length before truncation ----
_MAX_MESSAGE_LEN = 200


def _truncate(message: str, limit: int = _MAX_MESSAGE_LEN) -> str:
    """Truncate a long error message, adding an ellipsis if shortened."""
    if len(message) <= limit:
        return message
    return message[:limit] + "…"


def display_resolution_error(console: Console, error: Exception, verbose: bool = False) -> bool:
    """Display a resolution or load error with clean Rich formatting.

    Args:
        console: Rich console for output
        error: The error to display
        verbose: If True, also print traceback

    Returns:
        True if error was handled, False if not (caller should handle)
    """
    if not isinstance(error, (ResolutionError, ModuleLoadError)):
        return False

    content = Text()
    candidates_table = None

    if isinstance(error, ModuleNotFoundError):
        title = "Module Not Found"
        content.append("Request: ", style="dim")
        content.append(error.request, style="bold cyan")
        content.append("\n")
        content.append("Kind: ", style="dim")
        content.append(error.kind, style="yellow")

        candidates_table = Table(show_header=False, box=None, padding=(0, 1))
        candidates_table.add_column("Order", style="dim", width=3)
        candidates_table.add_column("Status", style="red", width=3)
        candidates_table.add_column("Candidate", style="bold")
        for i, candidate in enumerate(error.candidates, 1):
            candidates_table.add_row(f"{i}.", "✗", candidate)
    elif isinstance(error, UnsupportedTypeError):
        title = "Unsupported Module Value"
        content.append("Value type: ", style="dim")
        content.append(type(error.request).__name__, style="bold cyan")
        content.append("\n")
        content.append("Allowed: ", style="dim")
        content.append(", ".join(error.allowed) or "(none)", style="yellow")
    elif isinstance(error, InvalidPathError):
        title = "Invalid Module Path"
        content.append("Path: ", style="dim")
        content.append(error.request, style="bold cyan")
        content.append("\n")
        content.append("Problem: ", style="dim")
        content.append(error.reason, style="red")
    elif isinstance(error, ModuleLoadError):
        title = "Module Load Failed"
        content.append(_truncate(str(error)), style="white")
    else:
        title = "Resolution Failed"
        content.append(_truncate(str(error)), style="white")

    console.print()
    console.print(
        Panel(
            content,
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
    )

    if candidates_table is not None:
        console.print(candidates_table)
        console.print()

    console.print(f"[dim]Tip: {_get_actionable_tip(error)}[/dim]")
    console.print()

    # Verbose mode: show traceback
    if verbose:
        console.print("[dim]─── Traceback ───[/dim]")
        if sys.exc_info()[0] is not None:
            console.print_exception()

    return True


def _get_actionable_tip(error: Exception) -> str:
    """Generate an actionable tip based on the error."""
    if isinstance(error, ModuleNotFoundError):
        preferred = error.candidates[0] if error.candidates else error.request
        return f"Declare '{preferred}' in pyproject.toml or package.json, or reference the {error.kind} by path"

    if isinstance(error, UnsupportedTypeError):
        return f"Use a package name, a path, or one of the allowed value types for a {error.kind}"

    if isinstance(error, InvalidPathError):
        return "Remove empty segments (such as '//') from the path"

    if isinstance(error, ModuleLoadError):
        return "Check that the module imports cleanly with the current Python environment"

    return "Check that pyproject.toml and package.json in the project root are readable"
