"""
Deployer - UI Components
Standardized command header
"""

from rich.console import Console
from rich.markup import escape

LOGO = "deployer"

# Color scheme
BRAND_COLOR = "color(214)"


def show_header(
    title: str,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized deployer command header.

    Args:
        title: Main title (e.g., "Deploy", "Ad-hoc Command")
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy",
            details={"Service": "api", "Image": "discoenv/api:dev"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold {BRAND_COLOR}]{LOGO}[/bold {BRAND_COLOR}] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{escape(title)}[/bold white]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{escape(str(value))}[/cyan]")

    console.print()
