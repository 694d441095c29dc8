"""
Tool Resolution

Locates the external executables a run depends on.
"""

import shutil
from dataclasses import dataclass
from typing import Callable, Optional

from deployer.constants import ANSIBLE_BINARY, ANSIBLE_PLAYBOOK_BINARY, GIT_BINARY
from deployer.exceptions import ToolNotFoundError

Which = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class ToolPaths:
    """Absolute paths of the external tools used by the pipeline."""

    git: str
    ansible_playbook: str


def resolve_tool(name: str, which: Which = shutil.which) -> str:
    """
    Find an executable on PATH.

    Raises:
        ToolNotFoundError: If the executable is absent
    """
    path = which(name)
    if not path:
        raise ToolNotFoundError(name)
    return path


def resolve_pipeline_tools(which: Which = shutil.which) -> ToolPaths:
    return ToolPaths(
        git=resolve_tool(GIT_BINARY, which),
        ansible_playbook=resolve_tool(ANSIBLE_PLAYBOOK_BINARY, which),
    )


def resolve_ansible(which: Which = shutil.which) -> str:
    return resolve_tool(ANSIBLE_BINARY, which)
