"""CLI command printing clone paths"""

import click

from gitr.cli.output import handle_gitr_errors
from gitr.cli.utils.config import get_config
from gitr.git.clone import CloneOrchestrator


@click.command(name="path")
@click.argument("url")
@click.option(
    "--create-dir",
    is_flag=True,
    default=False,
    help="Use the owner/repo directory hierarchy.",
)
@handle_gitr_errors
def path(url: str, create_dir: bool):
    """Print the directory a repository is (or would be) cloned into.

    Example:

      cd $(gitr path git@github.com:owner/repo.git)
    """
    orchestrator = CloneOrchestrator(get_config())
    click.echo(orchestrator.get_clone_path(url, create_dir=create_dir))
