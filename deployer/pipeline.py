"""
Deployment Pipeline

Runs the fixed sequence of a deployment: validate, resolve tools, prepare
and clone each checkout, merge configuration trees, then the four tagged
ansible-playbook phases. The first failing step raises and nothing after it
runs; completed steps are never rolled back.
"""

import shutil
from typing import List, Optional

from deployer.ansible_runner import AnsibleRunner, deployment_phases
from deployer.command_runner import CommandRunner
from deployer.exceptions import WorkspaceError
from deployer.git_utils import GitClient
from deployer.logger import DeployLogger
from deployer.models.config import DeploymentConfig
from deployer.models.results import CommandResult
from deployer.tools import ToolPaths, Which, resolve_pipeline_tools
from deployer.tree_merger import ConfigTreeMerger
from deployer.workspace import CheckoutDirectory


class DeploymentPipeline:
    """
    Single-threaded deployment runner.

    The external repository is optional: without it the playbook phases run
    in the internal checkout; with it the external checkout is cloned too,
    receives the internal configuration trees, and hosts the phases.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        logger: DeployLogger,
        runner: Optional[CommandRunner] = None,
        which: Which = shutil.which,
        merger: Optional[ConfigTreeMerger] = None,
    ):
        self.config = config
        self.logger = logger
        self.runner = runner or CommandRunner()
        self.which = which
        self.merger = merger or ConfigTreeMerger(logger)
        self.results: List[CommandResult] = []

    def checkouts(self) -> List[CheckoutDirectory]:
        """Checkouts this run creates, in clone order."""
        config = self.config
        checkouts = [
            CheckoutDirectory(
                label="internal",
                path=config.internal_checkout,
                repo_url=config.git_repo_internal,
                branch=config.git_branch_internal,
            )
        ]
        if config.has_external_repo:
            checkouts.append(
                CheckoutDirectory(
                    label="external",
                    path=config.external_checkout,
                    repo_url=config.git_repo_external,
                    branch=config.git_branch_external,
                )
            )
        return checkouts

    def run(self) -> List[CommandResult]:
        """
        Execute every step in order.

        Returns:
            Results of each external invocation, in the order they ran

        Raises:
            DeployerError: From the first step that fails
        """
        self.validate()
        tools = self.resolve_tools()

        git = GitClient(tools.git, self.runner, self.logger, self.config.timeout)
        for checkout in self.checkouts():
            self.prepare_checkout(git, checkout)

        if self.config.has_external_repo:
            self.merge_config_trees()

        self.run_phases(tools)
        return self.results

    def validate(self):
        self.logger.step("Validating configuration")
        self.config.ensure_valid()
        if self.config.has_external_repo:
            self.logger.success("Two-repository deployment")
        else:
            self.logger.success("Single-repository deployment")

    def resolve_tools(self) -> ToolPaths:
        self.logger.step("Resolving external tools")
        tools = resolve_pipeline_tools(self.which)
        self.logger.success(f"git: {tools.git}")
        self.logger.success(f"ansible-playbook: {tools.ansible_playbook}")
        return tools

    def prepare_checkout(self, git: GitClient, checkout: CheckoutDirectory):
        """
        Reset, clone, check out and pull one repository.

        Args:
            git: Git client bound to this run
            checkout: Checkout to (re)create
        """
        self.logger.step(f"Preparing {checkout.label} checkout")
        try:
            checkout.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceError(
                f"Cannot create working directory {checkout.path.parent}",
                context=str(e),
            ) from e

        if checkout.reset():
            self.logger.success(f"Removed stale {checkout.path.name}")

        self.logger.log(f"Cloning the {checkout.label} repo {checkout.repo_url}")
        self.results.append(git.clone(checkout.repo_url, checkout.path))
        self.logger.success(f"Cloned {checkout.repo_url}")

        self.logger.log(
            f"Checking out the {checkout.branch} branch from the {checkout.label} repo"
        )
        self.results.append(git.checkout(checkout.branch, checkout.path))

        self.logger.log(
            f"Pulling the {checkout.branch} branch from the {checkout.label} repo"
        )
        self.results.append(git.pull(checkout.path))
        self.logger.success(f"On {checkout.branch}, up to date")

    def merge_config_trees(self):
        config = self.config
        self.logger.step("Merging configuration trees")
        written = self.merger.merge_subdirs(
            config.internal_checkout, config.external_checkout, config.merge_dirs
        )
        self.logger.success(
            f"{len(written)} file(s) copied into {', '.join(config.merge_dirs)}"
        )

    def run_phases(self, tools: ToolPaths):
        ansible = AnsibleRunner(
            tools.ansible_playbook,
            self.runner,
            self.logger,
            verbose=self.logger.verbose,
            timeout=self.config.timeout,
        )
        cwd = self.config.deploy_root

        for phase in deployment_phases(self.config):
            self.logger.step(phase.description)
            self.results.append(ansible.run_phase(self.config, phase, cwd))
            self.logger.success(f"{phase.name} phase complete")
