"""Base classes for deployer commands."""

from deployer.base.base_command import BaseCommand

__all__ = ["BaseCommand"]
