"""
Ad-hoc Command

Run a raw shell command on an inventory group with ``ansible -a``.
"""

import shutil
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from deployer.ansible_runner import AnsibleRunner
from deployer.base import BaseCommand
from deployer.command_runner import CommandRunner
from deployer.config_loader import envvar_for
from deployer.exceptions import ConfigurationError
from deployer.tools import Which, resolve_ansible


class AdhocCommand(BaseCommand):
    """Execute one shell command across an ansible host group."""

    def __init__(
        self,
        group: str,
        shell_command: str,
        inventory: Optional[str] = None,
        workdir: Optional[Path] = None,
        timeout: Optional[float] = None,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        console: Optional[Console] = None,
        runner: Optional[CommandRunner] = None,
        which: Which = shutil.which,
    ):
        super().__init__(verbose=verbose, log_dir=log_dir, console=console)
        self.group = group
        self.shell_command = shell_command
        self.inventory = inventory
        self.workdir = workdir
        self.timeout = timeout
        self.runner = runner or CommandRunner()
        self.which = which

    def execute(self) -> None:
        """Execute ad-hoc command."""
        self.show_header(
            title="Ad-hoc Command",
            details={"Group": self.group, "Command": self.shell_command},
        )
        logger = self.init_logger(self.group or "deployer", "adhoc")

        logger.step("Validating arguments")
        if not self.group.strip():
            raise ConfigurationError("GROUP must not be empty.")
        if not self.shell_command.strip():
            raise ConfigurationError("COMMAND must not be empty.")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("--timeout must be a positive number of seconds.")

        ansible = resolve_ansible(self.which)
        logger.success(f"ansible: {ansible}")

        logger.step(f"Running on {self.group}")
        runner = AnsibleRunner(
            ansible,
            self.runner,
            logger,
            verbose=self.verbose,
            timeout=self.timeout,
        )
        runner.run_adhoc(
            self.group,
            self.shell_command,
            inventory=self.inventory,
            cwd=self.workdir,
        )
        logger.success("Command executed successfully")
        self.print_logs_location()


@click.command(name="adhoc")
@click.argument("group")
@click.argument("shell_command", metavar="COMMAND")
@click.option(
    "--inventory",
    "-i",
    envvar=envvar_for("inventory"),
    help="The ansible inventory to use (ansible's default when omitted)",
)
@click.option(
    "--workdir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory ansible runs in",
)
@click.option(
    "--timeout",
    envvar=envvar_for("timeout"),
    type=float,
    help="Seconds the command may run before it is killed",
)
@click.pass_context
def adhoc(ctx, group, shell_command, inventory, workdir, timeout):
    """
    Run a shell command on an inventory group

    Wraps ``ansible GROUP -a COMMAND``.

    \b
    Examples:
      deployer adhoc webservers "systemctl status api"
      deployer adhoc all "docker ps" -i inventories/prod
    """
    obj = ctx.obj or {}
    cmd = AdhocCommand(
        group,
        shell_command,
        inventory=inventory,
        workdir=workdir,
        timeout=timeout,
        verbose=obj.get("verbose", False),
        log_dir=obj.get("log_dir"),
        console=obj.get("console"),
        runner=obj.get("runner"),
        which=obj.get("which", shutil.which),
    )
    cmd.run()
