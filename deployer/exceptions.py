"""
Deployer Exception Hierarchy

Every failure in a deployment run is fatal. Each exception carries the
ErrorKind of the step that failed; the CLI entry point maps it to an exit code.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of deployment failure, one per pipeline step."""

    CONFIG_INVALID = "config_invalid"
    TOOL_NOT_FOUND = "tool_not_found"
    DIRECTORY_CLEANUP_FAILED = "directory_cleanup_failed"
    CLONE_FAILED = "clone_failed"
    CHECKOUT_FAILED = "checkout_failed"
    PULL_FAILED = "pull_failed"
    COPY_FAILED = "copy_failed"
    PULL_PHASE_FAILED = "pull_phase_failed"
    CONFIGURE_PHASE_FAILED = "configure_phase_failed"
    SERVICE_PHASE_FAILED = "service_phase_failed"
    RESTART_PHASE_FAILED = "restart_phase_failed"
    ADHOC_COMMAND_FAILED = "adhoc_command_failed"

    @property
    def exit_code(self) -> int:
        from deployer.constants import EXIT_CODES

        return EXIT_CODES[self]


class DeployerError(Exception):
    """Base exception for all deployer errors."""

    kind: ErrorKind = ErrorKind.CONFIG_INVALID

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
    ):
        self.message = message
        self.context = context
        if kind is not None:
            self.kind = kind
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code


class ConfigurationError(DeployerError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.CONFIG_INVALID

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        missing_flags: Optional[list[str]] = None,
    ):
        self.missing_flags = missing_flags or []
        super().__init__(message, context)


class ToolNotFoundError(DeployerError):
    """Raised when a required executable is not on PATH."""

    kind = ErrorKind.TOOL_NOT_FOUND

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(
            f'exec: "{tool}": executable file not found in $PATH',
            context="Install it or add its directory to PATH",
        )


class WorkspaceError(DeployerError):
    """Raised when a stale checkout directory cannot be removed."""

    kind = ErrorKind.DIRECTORY_CLEANUP_FAILED


class GitError(DeployerError):
    """Raised when a git command fails (clone, checkout or pull)."""

    kind = ErrorKind.CLONE_FAILED


class CopyError(DeployerError):
    """Raised when merging configuration trees fails."""

    kind = ErrorKind.COPY_FAILED


class AnsibleError(DeployerError):
    """Raised when an ansible invocation exits non-zero."""

    kind = ErrorKind.ADHOC_COMMAND_FAILED
