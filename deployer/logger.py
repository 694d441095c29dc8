"""
Logging system for deployer
Writes every run to a log file in real-time and prints a clean step view
"""

import re
import shlex
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

from rich.console import Console
from rich.markup import escape

from deployer.constants import LOG_DATE_FORMAT, LOG_TIME_FORMAT

default_console = Console()

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class DeployLogger:
    """
    Manages logging for deployment runs
    - Writes all output to a log file in real-time (when a log dir is given)
    - Echoes subprocess output verbatim to the console
    - Captures errors with context
    """

    def __init__(
        self,
        name: str,
        operation: str,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        console: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            name: Name the logs are grouped under (the service being deployed)
            operation: Operation name (e.g., 'deploy', 'adhoc')
            verbose: If True, show every log line in console
            log_dir: Root of the logs tree; None disables the log file
            console: Rich console to print to (module console by default)
        """
        self.name = name or "deployer"
        self.operation = operation
        self.verbose = verbose
        self.console = console or default_console
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.current_step = ""
        self.has_errors = False

        if log_dir is not None:
            # Structure: {log_dir}/{name}/{date}/{time}_{operation}.log
            now = datetime.now()
            run_logs_dir = (
                Path(log_dir).resolve() / self.name / now.strftime(LOG_DATE_FORMAT)
            )
            run_logs_dir.mkdir(parents=True, exist_ok=True)

            self.log_path = (
                run_logs_dir / f"{now.strftime(LOG_TIME_FORMAT)}_{operation}.log"
            )
            self.log_file = open(self.log_path, "w", buffering=1)
            self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
Deployer Run Log
{"=" * 80}
Service: {self.name}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)
        self.log_file.flush()

    def _write(self, text: str):
        if self.log_file:
            self.log_file.write(text)
            self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        self._write(f"[{timestamp}] [{level}] {message}\n")

        if self.verbose:
            if level == "ERROR":
                self.console.print(f"[red]{escape(message)}[/red]", highlight=False)
            elif level == "WARNING":
                self.console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
            elif level == "DEBUG":
                self.console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
            else:
                self.console.print(message, markup=False, highlight=False)

    def log_command(self, command: Union[str, Sequence[str]]):
        """Log a command being executed"""
        if not isinstance(command, str):
            command = shlex.join(command)
        self.log(f"Executing: {command}", "DEBUG")

    def show_command(self, command: Union[str, Sequence[str]]):
        """Log a command and echo it to the console"""
        if not isinstance(command, str):
            command = shlex.join(command)
        self.log_command(command)

        if not self.verbose:
            self.console.print(f"  [dim]$ {escape(command)}[/dim]", highlight=False)

    def log_output(self, output: str, stream: str = "output"):
        """
        Write command output to the log file only, ANSI codes stripped

        Args:
            output: Command output (single line or multiline)
            stream: Stream label written before each line
        """
        if not output or not self.log_file:
            return

        clean_output = ANSI_ESCAPE.sub("", output)
        for line in clean_output.splitlines():
            self.log_file.write(f"  [{stream}] {line}\n")
        self.log_file.flush()

    def emit_output(self, output: str, stream: str = "output"):
        """
        Print command output verbatim and record it in the log file

        The text bypasses rich rendering and goes straight to the console's
        file, so markup, tabs, carriage returns and blank lines come through
        untouched. A final newline is added only when the output lacks one.
        """
        self.log_output(output, stream)
        if output:
            stream_file = self.console.file
            stream_file.write(output if output.endswith("\n") else output + "\n")
            stream_file.flush()

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
        """
        self.has_errors = True

        error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
        if context:
            error_block += f"\nContext: {context}\n"
        error_block += f"{'!' * 80}\n\n"
        self._write(error_block)

        self.console.print()
        self.console.print(f"[bold red]✗ {escape(error)}[/bold red]", highlight=False)
        if context:
            self.console.print(f"  [color(208)]{escape(context)}[/color(208)]", highlight=False)

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            self.console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self.console.print(
                f"[color(214)]▶[/color(214)] [white]{escape(step_name)}[/white]",
                highlight=False,
            )

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(f"  [dim]✓ {escape(message)}[/dim]", highlight=False)

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and exc_type is not SystemExit:
            self.has_errors = True
            self._write(
                f"[{datetime.now().strftime('%H:%M:%S')}] [ERROR] "
                f"{exc_type.__name__}: {exc_val}\n"
            )
        self.close()
        return False
