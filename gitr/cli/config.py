"""CLI commands for the gitr configuration"""

import click

from gitr.cli.output import console, handle_gitr_errors
from gitr.config import dump_config, ensure_initial_config, get_config_file, load_config


@click.group(name="config")
def config():
    """Manage the gitr configuration."""
    pass


@config.command("init")
@handle_gitr_errors
def init():
    """Write the default configuration unless one exists."""
    config_path = get_config_file()
    existed = config_path.exists()
    ensure_initial_config(config_path)
    if existed:
        console.print(f"Configuration already exists at {config_path}")
    else:
        console.print(f"[green]✓ Created configuration at {config_path}[/green]")


@config.command("show")
@handle_gitr_errors
def show():
    """Print the configuration."""
    click.echo(dump_config(load_config(ensure_initial_config())), nl=False)


@config.command("path")
def path():
    """Print the location of the configuration file."""
    click.echo(get_config_file())


@config.command("edit")
@handle_gitr_errors
def edit():
    """Open the configuration in $EDITOR and validate the result."""
    config_path = ensure_initial_config()
    click.edit(filename=str(config_path))
    load_config(config_path)
    console.print("[green]✓ Configuration is valid[/green]")
