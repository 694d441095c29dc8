"""GitClient against real repositories on disk."""

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path

from deployer.command_runner import CommandRunner
from deployer.exceptions import ErrorKind, GitError
from deployer.git_utils import GitClient
from deployer.logger import DeployLogger

from fakes import make_console

GIT = shutil.which("git")


def git(*args, cwd):
    subprocess.run(
        [GIT, "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


@unittest.skipIf(GIT is None, "git is not installed")
class GitClientIntegrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.origin = root / "origin"
        self.origin.mkdir()
        git("init", "-q", cwd=self.origin)
        git("symbolic-ref", "HEAD", "refs/heads/main", cwd=self.origin)
        (self.origin / "site.yml").write_text("- hosts: all\n")
        git("add", ".", cwd=self.origin)
        git("commit", "-q", "-m", "initial", cwd=self.origin)
        git("branch", "dev", cwd=self.origin)

        self.target = root / "work" / "internal-deployer-checkout"
        self.target.parent.mkdir()
        logger = DeployLogger("api", "deploy", console=make_console())
        self.client = GitClient(GIT, CommandRunner(), logger)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_clone_checkout_pull(self) -> None:
        self.client.clone(str(self.origin), self.target)
        self.client.checkout("dev", self.target)

        git("checkout", "-q", "dev", cwd=self.origin)
        (self.origin / "group_vars.yml").write_text("env: dev\n")
        git("add", ".", cwd=self.origin)
        git("commit", "-q", "-m", "vars", cwd=self.origin)

        self.client.pull(self.target)
        self.assertEqual((self.target / "group_vars.yml").read_text(), "env: dev\n")

    def test_clone_failure(self) -> None:
        with self.assertRaises(GitError) as ctx:
            self.client.clone(str(self.origin.parent / "missing"), self.target)
        self.assertEqual(ctx.exception.kind, ErrorKind.CLONE_FAILED)

    def test_checkout_unknown_branch(self) -> None:
        self.client.clone(str(self.origin), self.target)
        with self.assertRaises(GitError) as ctx:
            self.client.checkout("no-such-branch", self.target)
        self.assertEqual(ctx.exception.kind, ErrorKind.CHECKOUT_FAILED)


if __name__ == "__main__":
    unittest.main()
