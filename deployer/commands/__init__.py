"""Deployer CLI commands."""
