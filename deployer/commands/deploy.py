"""
Deploy Command

Clone the deployment repositories and roll the service out with the four
tagged ansible-playbook phases.
"""

import shutil
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from deployer.base import BaseCommand
from deployer.command_runner import CommandRunner
from deployer.config_loader import envvar_for
from deployer.constants import (
    DEFAULT_BRANCH,
    DEFAULT_DOCKER_ACCOUNT,
    DEFAULT_DOCKER_TAG,
    DEFAULT_ESCALATION,
    DEFAULT_MERGE_DIRS,
    ESCALATION_METHODS,
)
from deployer.models.config import DeploymentConfig
from deployer.pipeline import DeploymentPipeline
from deployer.tools import Which


class DeployCommand(BaseCommand):
    """
    Run a full deployment.

    Features:
    - Single or two-repository checkouts
    - Configuration tree merge between checkouts
    - Tagged ansible phases, stopping at the first failure
    - Automatic logging
    """

    def __init__(
        self,
        config: DeploymentConfig,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        console: Optional[Console] = None,
        runner: Optional[CommandRunner] = None,
        which: Which = shutil.which,
    ):
        """
        Initialize deploy command.

        Args:
            config: Run configuration
            verbose: Whether to show verbose output
            log_dir: Root of the log tree (None disables log files)
            console: Console to print to
            runner: Command runner (tests pass a recording double)
            which: Executable lookup used to resolve git and ansible-playbook
        """
        super().__init__(verbose=verbose, log_dir=log_dir, console=console)
        self.config = config
        self.runner = runner
        self.which = which

    def execute(self) -> None:
        """Execute deploy command."""
        config = self.config
        details = {
            "Service": config.service or "-",
            "Image": config.image if config.repo else "-",
            "Repository": config.git_repo_internal or "-",
        }
        if config.has_external_repo:
            details["External repository"] = config.git_repo_external
        self.show_header(title="Deploy", details=details)

        logger = self.init_logger(config.service or "deployer", "deploy")

        pipeline = DeploymentPipeline(
            config, logger, runner=self.runner, which=self.which
        )
        pipeline.run()

        self.console.print(
            f"\n[bold green]✓ Deployed {escape(config.service)}[/bold green] [dim]({escape(config.image)})[/dim]",
            highlight=False,
        )
        self.print_logs_location()


@click.command(name="deploy")
@click.option(
    "--git-repo-internal",
    envvar=envvar_for("git_repo_internal"),
    help="The internal git repository to clone",
)
@click.option(
    "--git-branch-internal",
    envvar=envvar_for("git_branch_internal"),
    default=DEFAULT_BRANCH,
    show_default=True,
    help="The git branch to check out in the internal repo",
)
@click.option(
    "--git-repo-external",
    envvar=envvar_for("git_repo_external"),
    help="The external git repository to clone (enables the config merge)",
)
@click.option(
    "--git-branch-external",
    envvar=envvar_for("git_branch_external"),
    default=DEFAULT_BRANCH,
    show_default=True,
    help="The git branch to check out in the external repo",
)
@click.option(
    "--account",
    envvar=envvar_for("account"),
    default=DEFAULT_DOCKER_ACCOUNT,
    show_default=True,
    help="The Docker account to use",
)
@click.option("--repo", envvar=envvar_for("repo"), help="The Docker repo to pull")
@click.option(
    "--tag",
    envvar=envvar_for("tag"),
    default=DEFAULT_DOCKER_TAG,
    show_default=True,
    help="The docker tag to pull from",
)
@click.option(
    "--vault-pass",
    envvar=envvar_for("vault_pass"),
    help="The path to the ansible vault password file",
)
@click.option(
    "--secret",
    envvar=envvar_for("secret"),
    help="The file encrypted by ansible-vault",
)
@click.option(
    "--inventory",
    envvar=envvar_for("inventory"),
    help="The ansible inventory to use",
)
@click.option(
    "--user",
    envvar=envvar_for("user"),
    help="The sudo user to use with the ansible command",
)
@click.option(
    "--service",
    envvar=envvar_for("service"),
    help="The service to restart on the host",
)
@click.option(
    "--pull-tag",
    envvar=envvar_for("pull_tag"),
    help="Ansible tag for the phase that updates the images",
)
@click.option(
    "--config-tag",
    envvar=envvar_for("config_tag"),
    help="Ansible tag for the phase that updates the configs",
)
@click.option(
    "--service-tag",
    envvar=envvar_for("service_tag"),
    help="Ansible tag for the phase that updates systemd service files",
)
@click.option(
    "--restart-tag",
    envvar=envvar_for("restart_tag"),
    help="Ansible tag for the phase that restarts the containers",
)
@click.option(
    "--playbook",
    envvar=envvar_for("playbook"),
    help="The ansible playbook to use",
)
@click.option(
    "--merge-dir",
    "merge_dirs",
    multiple=True,
    default=DEFAULT_MERGE_DIRS,
    show_default=True,
    help="Subdirectory copied from the internal into the external checkout (repeatable)",
)
@click.option(
    "--workdir",
    envvar=envvar_for("workdir"),
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the checkouts are created in [default: current directory]",
)
@click.option(
    "--escalation",
    envvar=envvar_for("escalation"),
    type=click.Choice(ESCALATION_METHODS),
    default=DEFAULT_ESCALATION,
    show_default=True,
    help="Privilege escalation flag passed to ansible-playbook",
)
@click.option(
    "--timeout",
    envvar=envvar_for("timeout"),
    type=float,
    help="Seconds each external command may run before it is killed",
)
@click.pass_context
def deploy(ctx, **options):
    """
    Deploy a service with ansible

    Clones the internal repository (and the external one, when given),
    copies group_vars and inventories from the internal checkout into the
    external one, then runs the playbook once per tag: pull, config,
    service, restart. The first failure stops the run.

    \b
    Examples:
      deployer deploy --git-repo-internal git@host:ops/deploy.git \\
        --repo api --vault-pass ~/.vault --secret secrets.yml \\
        --inventory inventories/prod --user deploy --service api \\
        --pull-tag pull --config-tag config --service-tag service \\
        --restart-tag restart --playbook site.yml

      # Everything from a config file
      deployer --config deploy.yml deploy
    """
    obj = ctx.obj or {}
    config = DeploymentConfig.from_options(options)

    cmd = DeployCommand(
        config,
        verbose=obj.get("verbose", False),
        log_dir=obj.get("log_dir"),
        console=obj.get("console"),
        runner=obj.get("runner"),
        which=obj.get("which", shutil.which),
    )
    cmd.run()
