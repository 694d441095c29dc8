"""
Result Models

Dataclass models for command outputs and validation outcomes.
"""

import shlex
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class CommandResult:
    """Exit status and combined stdout/stderr of one external invocation."""

    returncode: int
    output: str = ""
    args: tuple = ()
    timed_out: bool = False

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0 and not self.timed_out

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return not self.is_success

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def __repr__(self) -> str:
        return f"CommandResult(returncode={self.returncode}, command='{self.command_line[:50]}')"


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        """Add an error to the validation result."""
        self.errors.append(error)
        self.is_valid = False

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.is_valid}, errors={len(self.errors)})"
