"""Deployer - clone deployment repositories and roll services out with ansible."""

__version__ = "1.0.0"
