"""
Command Runner

Executes external tools and captures their combined output.
"""

import subprocess
from pathlib import Path
from typing import Optional, Sequence, Type

from deployer.exceptions import DeployerError, ErrorKind
from deployer.logger import DeployLogger
from deployer.models.results import CommandResult

# Exit status reported when the executable cannot be started at all
EXIT_NOT_EXECUTABLE = 127


class CommandRunner:
    """
    Run one external process to completion.

    Responsibilities:
    - Execute argument vectors without a shell
    - Merge stderr into stdout, in emission order
    - Enforce an optional timeout per invocation

    Tests substitute a recording double with the same ``run`` signature.
    """

    def __init__(self, env: Optional[dict] = None):
        """
        Initialize runner.

        Args:
            env: Environment for child processes (inherits ours when None)
        """
        self.env = env

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
        env: Optional[dict] = None,
    ) -> CommandResult:
        """
        Run a command and wait for it to exit.

        Args:
            args: Executable followed by its arguments
            cwd: Working directory for the child process
            timeout: Seconds before the child is killed (None waits forever)
            env: Environment override for this invocation only

        Returns:
            CommandResult with exit status and combined output
        """
        args = tuple(str(arg) for arg in args)

        try:
            process = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                env=env if env is not None else self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            output = e.output or ""
            if isinstance(output, bytes):
                output = output.decode(errors="replace")
            output += f"\ncommand timed out after {timeout:g} seconds"
            return CommandResult(
                returncode=-1, output=output, args=args, timed_out=True
            )
        except OSError as e:
            return CommandResult(
                returncode=EXIT_NOT_EXECUTABLE, output=str(e), args=args
            )

        return CommandResult(
            returncode=process.returncode, output=process.stdout or "", args=args
        )


def run_checked(
    runner: CommandRunner,
    logger: DeployLogger,
    args: Sequence[str],
    kind: ErrorKind,
    failure_message: str,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
    error_cls: Type[DeployerError] = DeployerError,
    env: Optional[dict] = None,
    echo: bool = False,
) -> CommandResult:
    """
    Run a command, echo its output, and fail the step on a non-zero exit.

    Output is emitted before the exit status is inspected so the log of a
    failed run always shows what the tool printed.

    Raises:
        DeployerError: ``error_cls`` with ``kind`` when the command fails or times out
    """
    if echo:
        logger.show_command(args)
    else:
        logger.log_command(args)
    result = runner.run(args, cwd=cwd, timeout=timeout, env=env)
    logger.emit_output(result.output)

    if result.is_failure:
        if result.timed_out:
            status = "timed out"
        else:
            status = f"exit status {result.returncode}"
        raise error_cls(
            f"{failure_message} ({status})",
            context=result.command_line,
            kind=kind,
        )
    return result
