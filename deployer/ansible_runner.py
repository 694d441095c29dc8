"""
Ansible Runner

Builds and executes the tagged ansible-playbook phases of a deployment and
the bare ``ansible <group> -a`` form used for ad-hoc commands.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from deployer.command_runner import CommandRunner, run_checked
from deployer.exceptions import AnsibleError, ErrorKind
from deployer.logger import DeployLogger
from deployer.models.config import DeploymentConfig
from deployer.models.results import CommandResult


@dataclass(frozen=True)
class AnsiblePhase:
    """One ansible-playbook invocation restricted to a single tag."""

    name: str
    tag: str
    kind: ErrorKind
    description: str


def deployment_phases(config: DeploymentConfig) -> List[AnsiblePhase]:
    """
    The four phases of a deployment, in the order they must run.

    Args:
        config: Run configuration supplying one tag per phase

    Returns:
        Phases for pull, configure, service file update and restart
    """
    return [
        AnsiblePhase(
            name="pull",
            tag=config.pull_tag,
            kind=ErrorKind.PULL_PHASE_FAILED,
            description=f"Updating {config.image} with ansible",
        ),
        AnsiblePhase(
            name="configure",
            tag=config.config_tag,
            kind=ErrorKind.CONFIGURE_PHASE_FAILED,
            description=f"Configuring {config.repo} with ansible",
        ),
        AnsiblePhase(
            name="service",
            tag=config.service_tag,
            kind=ErrorKind.SERVICE_PHASE_FAILED,
            description=f"Updating service file for {config.service} with ansible",
        ),
        AnsiblePhase(
            name="restart",
            tag=config.restart_tag,
            kind=ErrorKind.RESTART_PHASE_FAILED,
            description=f"Restarting {config.service} with ansible",
        ),
    ]


def build_playbook_command(
    ansible_playbook: str, config: DeploymentConfig, tag: str
) -> List[str]:
    """
    Argument vector for one tagged playbook run.

    Paths are passed through untouched; relative ones resolve against the
    checkout the phase runs in.
    """
    return [
        ansible_playbook,
        "-e",
        f"@{config.secret}",
        f"--vault-password-file={config.vault_pass}",
        "-i",
        config.inventory,
        config.privilege_flag,
        "-u",
        config.user,
        "--tags",
        tag,
        config.playbook,
    ]


def build_adhoc_command(
    ansible: str, group: str, command: str, inventory: Optional[str] = None
) -> List[str]:
    args = [ansible, group]
    if inventory:
        args += ["-i", inventory]
    args += ["-a", command]
    return args


class AnsibleRunner:
    """
    Run ansible with captured output and logging.

    Responsibilities:
    - Build the per-phase ansible-playbook command
    - Set up the child environment (unbuffered, colors only when verbose)
    - Fail the phase with its own error kind on a non-zero exit
    """

    def __init__(
        self,
        binary: str,
        runner: CommandRunner,
        logger: DeployLogger,
        verbose: bool = False,
        timeout: Optional[float] = None,
    ):
        """
        Initialize Ansible runner.

        Args:
            binary: Path to ansible-playbook (or ansible for ad-hoc runs)
            runner: Executes the commands
            logger: DeployLogger instance for logging
            verbose: Whether ansible may emit colored output
            timeout: Seconds each invocation may take (None waits forever)
        """
        self.binary = binary
        self.runner = runner
        self.logger = logger
        self.verbose = verbose
        self.timeout = timeout

    def _build_environment(self) -> dict:
        """
        Build environment variables for Ansible execution.

        Returns:
            Dictionary of environment variables
        """
        env = os.environ.copy()
        env.update(
            {
                "PYTHONUNBUFFERED": "1",
                "ANSIBLE_FORCE_COLOR": "true" if self.verbose else "false",
            }
        )
        if self.logger.log_path:
            ansible_log_path = (
                self.logger.log_path.parent
                / f"{self.logger.log_path.stem}_ansible.log"
            )
            env["ANSIBLE_LOG_PATH"] = str(ansible_log_path)
        return env

    def run_phase(
        self, config: DeploymentConfig, phase: AnsiblePhase, cwd: Path
    ) -> CommandResult:
        """
        Run one tagged playbook phase inside ``cwd``.

        Raises:
            AnsibleError: With the phase's error kind on failure
        """
        self.logger.log(phase.description)
        return run_checked(
            self.runner,
            self.logger,
            build_playbook_command(self.binary, config, phase.tag),
            phase.kind,
            f"Ansible {phase.name} phase failed for tag '{phase.tag}'",
            cwd=cwd,
            timeout=self.timeout,
            error_cls=AnsibleError,
            env=self._build_environment(),
            echo=True,
        )

    def run_adhoc(
        self,
        group: str,
        command: str,
        inventory: Optional[str] = None,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        """
        Run a raw shell command on every host in ``group``.

        Raises:
            AnsibleError: ADHOC_COMMAND_FAILED on a non-zero exit
        """
        return run_checked(
            self.runner,
            self.logger,
            build_adhoc_command(self.binary, group, command, inventory),
            ErrorKind.ADHOC_COMMAND_FAILED,
            f"Ad-hoc command failed on '{group}'",
            cwd=cwd,
            timeout=self.timeout,
            error_cls=AnsibleError,
            env=self._build_environment(),
            echo=True,
        )
