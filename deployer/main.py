#!/usr/bin/env python3
"""Deployer CLI - Main entry point"""

import functools
import os
import sys
from pathlib import Path

# Rich-Click: colored CLI help
import rich_click as click
from rich.console import Console
from rich.markup import escape

from deployer import __version__
from deployer.commands import adhoc, deploy
from deployer.config_loader import load_config_file, load_env_file
from deployer.constants import DEFAULT_LOG_DIR, EXIT_INTERRUPTED, EXIT_UNEXPECTED
from deployer.exceptions import DeployerError

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"
click.rich_click.ERRORS_EPILOGUE = ""

console = Console()

COMMANDS = {
    "deploy": deploy.deploy,
    "adhoc": adhoc.adhoc,
}


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import Abort, ClickException

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DeployerError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {escape(e.message)}")
            if e.context:
                console.print(f"  [dim]{escape(e.context)}[/dim]")
            sys.exit(e.exit_code)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except (Abort, KeyboardInterrupt):
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {escape(str(e))}\n")

            if os.environ.get("DEBUG") or os.environ.get("VERBOSE"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(EXIT_UNEXPECTED)

    return wrapper


def build_default_map(values: dict) -> dict:
    """Split config file values between the commands that accept them."""
    default_map = {}
    for name, command in COMMANDS.items():
        accepted = {param.name for param in command.params}
        default_map[name] = {k: v for k, v in values.items() if k in accepted}
    return default_map


def known_config_keys() -> set:
    keys = set()
    for command in COMMANDS.values():
        keys.update(
            param.name
            for param in command.params
            if param.param_type_name == "option"
        )
    return keys


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show all log lines in the console")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_LOG_DIR,
    show_default=True,
    help="Directory run logs are written under",
)
@click.option("--no-log-file", is_flag=True, help="Do not write a run log file")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with option values (flags and environment win over it)",
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Dotenv file with DEPLOYER_* variables [default: .env when present]",
)
@click.pass_context
def cli(ctx: click.Context, verbose, log_dir, no_log_file, config_file, env_file) -> None:
    """
    Deployer - clone deployment repositories and roll services out with ansible.

    \b
    Quick Start:
      deployer deploy --help            # All deployment flags
      deployer --config deploy.yml deploy
      deployer adhoc webservers "uptime"

    \b
    Option values come from, highest first:
      command-line flags
      DEPLOYER_* environment variables (and the .env file)
      the --config YAML file
      built-in defaults
    """
    obj = ctx.ensure_object(dict)
    obj.setdefault("verbose", verbose)
    obj.setdefault("log_dir", None if no_log_file else log_dir)

    load_env_file(env_file)

    if config_file:
        values = load_config_file(config_file, known_keys=known_config_keys())
        ctx.default_map = build_default_map(values)


for command in COMMANDS.values():
    cli.add_command(command)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli(standalone_mode=False)


if __name__ == "__main__":
    main()
