"""gitr CLI"""

import click

from gitr import __version__
from gitr.cli.clone import clone
from gitr.cli.config import config
from gitr.cli.path import path
from gitr.cli.web import page_commands, web_url
from gitr.web import Page

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="gitr")
@click.pass_context
def cli(ctx):
    """
    gitr: clone to organized paths, open PRs, pipelines and branches instantly.

    \b
    Examples:
      gitr clone https://github.com/owner/repo    # -> ~/scm/github.com/owner/repo
      gitr prs                                    # open PRs in the browser
      gitr pipe                                   # open pipelines/actions
    """
    ctx.ensure_object(dict)


@click.command(name="version")
def version():
    """Print the gitr version."""
    click.echo(f"gitr {__version__}")


cli.add_command(add_debug_option(clone))
cli.add_command(add_debug_option(path))
cli.add_command(add_debug_option(config))
cli.add_command(version)
cli.add_command(add_debug_option(web_url))

for command in page_commands():
    cli.add_command(add_debug_option(command))
    if command.name == Page.pipelines.value:
        cli.add_command(command, name="pipe")

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
