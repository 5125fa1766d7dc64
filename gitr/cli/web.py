"""CLI commands opening repository pages in the browser"""

from pathlib import Path
from typing import List

import click

from gitr.cli.output import handle_gitr_errors, print_summary, print_warning
from gitr.cli.utils.config import get_config
from gitr.cli.utils.logging import logger
from gitr.exceptions import LocalRepoError
from gitr.git.local import (
    branch_exists_on_remote,
    get_branch,
    get_default_branch,
    get_relative_path,
    get_remote_url,
    open_repo,
)
from gitr.git.url import get_hostname, get_repo_name, get_repo_path
from gitr.web import Page, get_file_url, get_page_url, get_web_url

PAGE_HELP = {
    Page.home: "Open the home page of the repo in the browser.",
    Page.branches: "Open the branches of the repo in the browser.",
    Page.prs: "Open the prs/mrs of the repo in the browser.",
    Page.commits: "Open the commits of the local branch in the browser.",
    Page.issues: "Open the issues of the repo in the browser.",
    Page.tags: "Open the tags of the repo in the browser.",
    Page.releases: "Open the releases of the repo in the browser.",
    Page.pipelines: "Open the pipelines/actions of the repo in the browser.",
    Page.rem: "Open the local branch of the repo in the browser.",
}

BRANCH_PAGES = (Page.commits, Page.rem)


def _resolve_remote(repo):
    remote_url = get_remote_url(repo)
    registry = get_config().registry()
    policy = registry.lookup(get_hostname(remote_url))
    repo_path = get_repo_path(remote_url, policy.hostname, policy.provider)
    web_url = get_web_url(
        policy.provider, policy.scheme.value, policy.hostname, repo_path
    )
    return remote_url, policy, repo_path, web_url


def open_page(page: Page, dry: bool):
    repo = open_repo()
    remote_url, policy, repo_path, web_url = _resolve_remote(repo)
    branch = get_branch(repo) if dry or page in BRANCH_PAGES else None

    if dry:
        print_summary(
            {
                "provider": policy.provider.value,
                "host": policy.hostname,
                "remote": remote_url,
                "web-url": web_url,
                "repo-path": repo_path,
                "repo-name": get_repo_name(repo_path),
                "branch": branch,
            }
        )
        return

    if page is Page.rem and not branch_exists_on_remote(repo, branch):
        print_warning(
            f"Branch '{branch}' not on remote", "Opening default branch instead."
        )
        try:
            branch = get_default_branch(repo)
        except LocalRepoError as e:
            logger.debug(f"Default branch lookup failed: {e.message}")
            print_warning(
                "Unable to determine default branch",
                f"Attempting to open '{branch}' anyway.",
            )

    url = get_page_url(page, policy.provider, web_url, branch)
    logger.debug(f"Opening {url}")
    click.launch(url)


def _page_command(page: Page) -> click.Command:
    @click.command(name=page.value, help=PAGE_HELP[page])
    @click.option(
        "--dry",
        is_flag=True,
        default=False,
        help="Show the repository details instead of opening the browser.",
    )
    @handle_gitr_errors
    def command(dry: bool):
        open_page(page, dry)

    return command


def page_commands() -> List[click.Command]:
    return [_page_command(page) for page in Page]


@click.command(name="web-url")
@click.argument("file_name", type=click.Path(path_type=Path))
@handle_gitr_errors
def web_url(file_name: Path):
    """Print the browser url of a file in the repo."""
    repo = open_repo()
    _, policy, _, repo_web_url = _resolve_remote(repo)
    click.echo(
        get_file_url(
            policy.provider,
            repo_web_url,
            get_branch(repo),
            get_relative_path(repo, file_name),
        )
    )
