#!/usr/bin/env python3
"""Main CLI entry point for dolly."""
import os

import click

from .builder import build_config_from_commands, parse_commands
from .config import load_config, save_config
from .errors import DollyError
from .log import LOG_LEVEL_ENV, setup_logging
from .tmux import create_session, terminate_session


@click.group()
@click.option('--log-level', default='INFO', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.version_option(package_name="dolly")
def cli(log_level):
    """Declarative tmux workspaces."""
    os.environ[LOG_LEVEL_ENV] = log_level
    setup_logging(log_level)


@cli.command("up")
@click.argument("config_file", type=click.Path(dir_okay=False))
def up(config_file):
    """Create the session described by CONFIG_FILE."""
    try:
        config = load_config(config_file)
        create_session(config)
    except DollyError as e:
        click.echo(f"Error creating tmux session: {e}", err=True)
        raise click.Abort()

    click.echo(f"Tmux session '{config.session_name}' created successfully with terminal '{config.terminal}'!")


@cli.command("down")
@click.argument("config_file", type=click.Path(dir_okay=False))
def down(config_file):
    """Terminate the session described by CONFIG_FILE."""
    try:
        config = load_config(config_file)
        terminate_session(config.session_name, config.rc_file)
    except DollyError as e:
        click.echo(f"Error terminating tmux session: {e}", err=True)
        raise click.Abort()

    click.echo(f"Tmux session '{config.session_name}' terminated successfully!")


@cli.command("exec")
@click.argument("commands")
@click.option("-n", "--name", "session_name", default="", help="Session name (prompted for if omitted)")
@click.option("-d", "--directory", default="", help="Working directory for every pane")
@click.option("-t", "--terminate", is_flag=True, help="Terminate the session instead of creating it")
def exec_(commands, session_name, directory, terminate):
    """Quick session with one pane per command in COMMANDS.

    COMMANDS is a comma-separated list, e.g. "npm run dev, npm test".
    """
    command_list = parse_commands(commands)
    if not command_list:
        click.echo("Error: no commands provided", err=True)
        raise click.Abort()

    if not session_name:
        session_name = click.prompt("Enter session name").strip()
        if not session_name:
            click.echo("Error: session name cannot be empty", err=True)
            raise click.Abort()

    try:
        if terminate:
            terminate_session(session_name)
            click.echo(f"Tmux session '{session_name}' terminated successfully!")
            return

        config = build_config_from_commands(session_name, command_list, directory)
        create_session(config)
    except DollyError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()

    click.echo(f"Tmux session '{session_name}' created successfully!")

    if not click.confirm("Save session configuration to YAML file?", default=False):
        return

    config_path = click.prompt("Enter config file path", default=f"{session_name}.yml")
    try:
        saved = save_config(config, config_path)
    except DollyError as e:
        click.echo(f"Error saving config: {e}", err=True)
        raise click.Abort()

    click.echo(f"Configuration saved to '{saved}'")


if __name__ == "__main__":
    cli()
