"""
Deployer Data Models

Dataclass models for run configuration and command results.
"""

from deployer.models.config import DeploymentConfig, REQUIRED_FLAGS
from deployer.models.results import CommandResult, ValidationResult

__all__ = [
    "DeploymentConfig",
    "REQUIRED_FLAGS",
    "CommandResult",
    "ValidationResult",
]
