"""
Base Command Class

Abstract base for all deployer CLI commands.
Provides logger setup, header display and the mapping from errors to
exit statuses.
"""

import os
import traceback
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from deployer.constants import EXIT_INTERRUPTED, EXIT_UNEXPECTED
from deployer.exceptions import DeployerError
from deployer.logger import DeployLogger
from deployer.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling (every DeployerError exits with its kind's status)
    """

    def __init__(
        self,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        console: Optional[Console] = None,
    ):
        self.verbose = verbose
        self.log_dir = log_dir
        self.console = console or Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, name: str, command_name: str) -> DeployLogger:
        """
        Initialize command logger.

        Args:
            name: Name the log files are grouped under
            command_name: Command name

        Returns:
            DeployLogger instance
        """
        self.logger = DeployLogger(
            name,
            command_name,
            verbose=self.verbose,
            log_dir=self.log_dir,
            console=self.console,
        )
        return self.logger

    def show_header(
        self,
        title: str,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in verbose mode)."""
        if not self.verbose:
            show_header(
                title=title,
                details=details,
                console=self.console,
            )

    def print_logs_location(self) -> None:
        if self.logger and self.logger.log_path:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle error with consistent formatting.

        Args:
            error: Exception object
            context: Optional context message
        """
        if isinstance(error, DeployerError):
            message = error.message
            context = error.context or context
        else:
            message = str(error)

        if self.logger:
            self.logger.log_error(message, context=context)
        else:
            self.console.print(f"[bold red]✗ {escape(message)}[/bold red]")
            if context:
                self.console.print(f"  [dim]{escape(context)}[/dim]")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Raises:
            SystemExit: With the failure's exit status
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self.print_logs_location()
            raise SystemExit(EXIT_INTERRUPTED)
        except SystemExit:
            raise
        except DeployerError as e:
            self.handle_error(e)
            self.print_logs_location()
            raise SystemExit(e.exit_code)
        except Exception as e:
            error_type = type(e).__name__
            self.handle_error(e, context=error_type)
            if os.environ.get("DEBUG") or os.environ.get("VERBOSE"):
                self.console.print("[dim]Traceback:[/dim]")
                self.console.print(traceback.format_exc(), markup=False)
            self.print_logs_location()
            raise SystemExit(EXIT_UNEXPECTED)
        finally:
            if self.logger:
                self.logger.close()
