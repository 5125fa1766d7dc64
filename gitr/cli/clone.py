"""CLI command for cloning repositories"""

import click

from gitr.cli.output import (
    console,
    handle_gitr_errors,
    print_already_exists,
    print_clone_report,
    print_clone_success,
)
from gitr.cli.progress import CloneProgressDisplay
from gitr.cli.utils.config import get_config
from gitr.cli.utils.logging import logger
from gitr.git.clone import CloneOrchestrator, CloneStatus


@click.command(name="clone")
@click.argument("url")
@click.option(
    "--dry",
    "-d",
    is_flag=True,
    default=False,
    help="Show where the repository would be cloned, without cloning.",
)
@click.option(
    "--create-dir",
    is_flag=True,
    default=False,
    help="Clone into an owner/repo directory hierarchy.",
)
@click.option(
    "--token",
    default=None,
    help="Personal access token for https clones.",
)
@handle_gitr_errors
def clone(url: str, dry: bool, create_dir: bool, token: str):
    """Clone a repository into its organized path.

    URL can be an ssh or https clone url, or any browser url of the
    repository such as a pull request or a file.

    Example:

      gitr clone https://github.com/owner/repo/pull/42
    """
    config = get_config()
    orchestrator = CloneOrchestrator(
        config, reporter=CloneProgressDisplay(console=console)
    )
    result = orchestrator.clone(url, token=token, create_dir=create_dir, dry=dry)
    logger.debug(f"clone finished: {result.status.value} {result.local_path}")

    if result.status is CloneStatus.dry_run:
        print_clone_report(result.report)
    elif result.status is CloneStatus.already_exists:
        print_already_exists(result.local_path)
    else:
        print_clone_success(result.local_path, result.transport)
