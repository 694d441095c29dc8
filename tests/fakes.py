"""Test doubles shared by the pipeline and CLI tests."""

import io
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console

from deployer.models.config import DeploymentConfig
from deployer.models.results import CommandResult


def fake_which(name: str) -> str:
    return f"/usr/bin/{name}"


def missing_tool(missing: str) -> Callable[[str], Optional[str]]:
    def which(name: str) -> Optional[str]:
        if name == missing:
            return None
        return fake_which(name)

    return which


def make_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


def console_text(console: Console) -> str:
    return console.file.getvalue()


def make_config(workdir: Path, **overrides) -> DeploymentConfig:
    values = dict(
        git_repo_internal="https://git.example.com/ops/internal.git",
        git_branch_internal="dev",
        repo="api",
        vault_pass="/etc/ansible/vault-pass",
        secret="secrets.yml",
        inventory="inventories/dev",
        user="deploy",
        service="api",
        pull_tag="pull",
        config_tag="config",
        service_tag="service",
        restart_tag="restart",
        playbook="site.yml",
        workdir=workdir,
    )
    values.update(overrides)
    return DeploymentConfig(**values)


class RecordingRunner:
    """
    Stands in for CommandRunner.

    Records every invocation. ``git clone`` creates the target directory
    with a single ``CLONED`` file; ``fail_when`` picks invocations that
    exit non-zero.
    """

    def __init__(
        self,
        fail_when: Optional[Callable[[tuple], bool]] = None,
        output: str = "",
        clone_files: Optional[dict] = None,
    ):
        self.calls: List[dict] = []
        self.fail_when = fail_when
        self.output = output
        self.clone_files = clone_files or {}

    @property
    def argvs(self) -> List[tuple]:
        return [call["args"] for call in self.calls]

    def run(self, args, cwd=None, timeout=None, env=None) -> CommandResult:
        args = tuple(str(arg) for arg in args)
        self.calls.append({"args": args, "cwd": cwd, "timeout": timeout, "env": env})

        if self.fail_when and self.fail_when(args):
            return CommandResult(returncode=1, output=self.output, args=args)

        if len(args) > 1 and args[1] == "clone":
            target = Path(args[3])
            target.mkdir(parents=True)
            (target / "CLONED").write_text(args[2])
            for relative, content in self.clone_files.get(target.name, {}).items():
                path = target / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)

        return CommandResult(returncode=0, output=self.output, args=args)


def git_step(args: tuple) -> Optional[str]:
    if args and args[0].endswith("/git") and len(args) > 1:
        return args[1]
    return None


def ansible_tag(args: tuple) -> Optional[str]:
    if args and args[0].endswith("ansible-playbook"):
        return args[args.index("--tags") + 1]
    return None
