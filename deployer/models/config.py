"""
Deployment Configuration Model

Immutable record of every parameter a deployment run needs.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from deployer.constants import (
    DEFAULT_BRANCH,
    DEFAULT_DOCKER_ACCOUNT,
    DEFAULT_DOCKER_TAG,
    DEFAULT_ESCALATION,
    DEFAULT_MERGE_DIRS,
    ESCALATION_METHODS,
    EXTERNAL_CHECKOUT_DIR,
    INTERNAL_CHECKOUT_DIR,
)
from deployer.exceptions import ConfigurationError
from deployer.models.results import ValidationResult

# Field name -> command-line flag, in the order flags are checked
REQUIRED_FLAGS = {
    "git_repo_internal": "--git-repo-internal",
    "git_branch_internal": "--git-branch-internal",
    "account": "--account",
    "repo": "--repo",
    "vault_pass": "--vault-pass",
    "secret": "--secret",
    "inventory": "--inventory",
    "user": "--user",
    "service": "--service",
    "config_tag": "--config-tag",
    "pull_tag": "--pull-tag",
    "restart_tag": "--restart-tag",
    "service_tag": "--service-tag",
    "playbook": "--playbook",
}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Parameters for one deployment run.

    Built once from parsed command-line input and passed explicitly to the
    pipeline. Tests construct it directly.
    """

    git_repo_internal: Optional[str] = None
    git_branch_internal: str = DEFAULT_BRANCH
    git_repo_external: Optional[str] = None
    git_branch_external: str = DEFAULT_BRANCH
    account: str = DEFAULT_DOCKER_ACCOUNT
    repo: Optional[str] = None
    tag: str = DEFAULT_DOCKER_TAG
    vault_pass: Optional[str] = None
    secret: Optional[str] = None
    inventory: Optional[str] = None
    user: Optional[str] = None
    service: Optional[str] = None
    config_tag: Optional[str] = None
    pull_tag: Optional[str] = None
    service_tag: Optional[str] = None
    restart_tag: Optional[str] = None
    playbook: Optional[str] = None
    merge_dirs: Tuple[str, ...] = DEFAULT_MERGE_DIRS
    workdir: Path = field(default_factory=Path.cwd)
    escalation: str = DEFAULT_ESCALATION
    timeout: Optional[float] = None

    @classmethod
    def from_options(cls, options: Dict[str, Any]) -> "DeploymentConfig":
        """
        Build a config from a mapping of option values.

        Keys that are not config fields are ignored, as are None values for
        fields that have a default, so the dataclass default applies.

        Args:
            options: Parsed option values (e.g. click params)

        Returns:
            DeploymentConfig instance
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, value in options.items():
            key = key.replace("-", "_")
            if key not in known or value is None:
                continue
            if key == "merge_dirs":
                value = tuple(value) or DEFAULT_MERGE_DIRS
            elif key == "workdir":
                value = Path(value)
            elif key == "timeout":
                value = float(value)
            values[key] = value

        return cls(**values)

    @property
    def has_external_repo(self) -> bool:
        """Whether the two-repository variant runs."""
        return self.git_repo_external is not None

    @property
    def image(self) -> str:
        return f"{self.account}/{self.repo}:{self.tag}"

    @property
    def privilege_flag(self) -> str:
        return f"--{self.escalation}"

    @property
    def workdir_path(self) -> Path:
        return Path(self.workdir).resolve()

    @property
    def internal_checkout(self) -> Path:
        return self.workdir_path / INTERNAL_CHECKOUT_DIR

    @property
    def external_checkout(self) -> Path:
        return self.workdir_path / EXTERNAL_CHECKOUT_DIR

    @property
    def deploy_root(self) -> Path:
        """Checkout the ansible phases run in."""
        if self.has_external_repo:
            return self.external_checkout
        return self.internal_checkout

    def validate(self) -> ValidationResult:
        """
        Check every required field is set.

        Returns:
            ValidationResult with one error per missing or invalid flag
        """
        result = ValidationResult(is_valid=True)

        for name, flag in REQUIRED_FLAGS.items():
            if _is_blank(getattr(self, name)):
                result.add_error(f"{flag} must be set.")

        if self.has_external_repo:
            if _is_blank(self.git_repo_external):
                result.add_error("--git-repo-external must not be blank.")
            if _is_blank(self.git_branch_external):
                result.add_error("--git-branch-external must be set.")

        if not self.merge_dirs:
            result.add_error("--merge-dir must be set at least once.")
        for name in self.merge_dirs:
            path = Path(name)
            if _is_blank(name) or path.is_absolute() or ".." in path.parts:
                result.add_error(
                    f"--merge-dir '{name}' must be a path relative to the checkout."
                )

        if self.escalation not in ESCALATION_METHODS:
            result.add_error(
                f"--escalation must be one of: {', '.join(ESCALATION_METHODS)}."
            )

        if self.timeout is not None and self.timeout <= 0:
            result.add_error("--timeout must be a positive number of seconds.")

        return result

    def ensure_valid(self) -> None:
        """
        Raise if the config cannot drive a run.

        Raises:
            ConfigurationError: Naming every missing flag
        """
        result = self.validate()
        if result.is_valid:
            return

        missing = [
            flag
            for name, flag in REQUIRED_FLAGS.items()
            if _is_blank(getattr(self, name))
        ]
        raise ConfigurationError(
            result.errors[0],
            context="\n".join(result.errors[1:]) or None,
            missing_flags=missing,
        )
