"""
Git Utilities

Wraps the ``git`` CLI for the clone, checkout and pull steps of a run.
"""

from pathlib import Path
from typing import Optional

from deployer.command_runner import CommandRunner, run_checked
from deployer.exceptions import ErrorKind, GitError
from deployer.logger import DeployLogger
from deployer.models.results import CommandResult


class GitClient:
    """
    Runs git commands against a checkout directory.

    Every command gets the checkout as an explicit working directory; the
    process's own current directory is never changed.
    """

    def __init__(
        self,
        git_binary: str,
        runner: CommandRunner,
        logger: DeployLogger,
        timeout: Optional[float] = None,
    ):
        self.git_binary = git_binary
        self.runner = runner
        self.logger = logger
        self.timeout = timeout

    def clone(self, repo_url: str, target_dir: Path) -> CommandResult:
        """
        Clone ``repo_url`` into ``target_dir``.

        Raises:
            GitError: CLONE_FAILED on a non-zero exit
        """
        return run_checked(
            self.runner,
            self.logger,
            [self.git_binary, "clone", repo_url, str(target_dir)],
            ErrorKind.CLONE_FAILED,
            f"Failed to clone {repo_url}",
            cwd=target_dir.parent,
            timeout=self.timeout,
            error_cls=GitError,
        )

    def checkout(self, branch: str, checkout_dir: Path) -> CommandResult:
        """
        Switch the checkout to ``branch``.

        Raises:
            GitError: CHECKOUT_FAILED on a non-zero exit
        """
        return run_checked(
            self.runner,
            self.logger,
            [self.git_binary, "checkout", branch],
            ErrorKind.CHECKOUT_FAILED,
            f"Failed to check out branch {branch}",
            cwd=checkout_dir,
            timeout=self.timeout,
            error_cls=GitError,
        )

    def pull(self, checkout_dir: Path) -> CommandResult:
        """
        Fast-forward the current branch.

        Raises:
            GitError: PULL_FAILED on a non-zero exit
        """
        return run_checked(
            self.runner,
            self.logger,
            [self.git_binary, "pull"],
            ErrorKind.PULL_FAILED,
            f"Failed to pull latest changes in {checkout_dir.name}",
            cwd=checkout_dir,
            timeout=self.timeout,
            error_cls=GitError,
        )
