"""
Browser urls of a repository's pages.

Every provider lays out its pages differently:

    github / generic:        <repo>/pulls, <repo>/tree/<branch>, <repo>/actions
    gitlab:                  <repo>/-/merge_requests, <repo>/-/tree/<branch>
    bitbucket-cloud:         <repo>/pull-requests, <repo>/src/<branch>
    bitbucket-datacenter:    projects/<KEY>/repos/<slug>/pull-requests
"""

from enum import Enum
from typing import Optional
from urllib.parse import quote

from gitr.model.repo import Provider


class Page(str, Enum):
    home = "web"
    branches = "branches"
    prs = "prs"
    commits = "commits"
    issues = "issues"
    tags = "tags"
    releases = "releases"
    pipelines = "pipelines"
    rem = "rem"


# Page suffixes without a branch component. A missing entry means the page
# does not exist for the provider and the repository home is opened instead.
_PAGES = {
    Provider.github: {
        Page.branches: "branches",
        Page.prs: "pulls",
        Page.issues: "issues",
        Page.tags: "tags",
        Page.releases: "releases",
        Page.pipelines: "actions",
    },
    Provider.gitlab: {
        Page.branches: "-/branches",
        Page.prs: "-/merge_requests",
        Page.issues: "-/issues",
        Page.tags: "-/tags",
        Page.releases: "-/releases",
        Page.pipelines: "-/pipelines",
    },
    Provider.bitbucket_cloud: {
        Page.branches: "branches",
        Page.prs: "pull-requests",
        Page.issues: "issues",
        Page.tags: "downloads/?tab=tags",
        Page.releases: "downloads",
        Page.pipelines: "pipelines",
    },
    Provider.bitbucket_datacenter: {
        Page.branches: "branches",
        Page.prs: "pull-requests",
        Page.tags: "tags",
        Page.pipelines: "builds",
    },
}
_PAGES[Provider.generic] = _PAGES[Provider.github]


def get_web_url(provider: Provider, scheme: str, hostname: str, repo_path: str) -> str:
    """Home page of a repository."""
    if provider is Provider.bitbucket_datacenter:
        project, _, slug = repo_path.partition("/")
        return f"{scheme}://{hostname}/projects/{project}/repos/{slug}"
    return f"{scheme}://{hostname}/{repo_path}"


def _quote_branch(branch: str) -> str:
    return quote(branch, safe="/")


def get_branch_url(provider: Provider, web_url: str, branch: str) -> str:
    """Source tree of a branch."""
    branch = _quote_branch(branch)
    if provider is Provider.gitlab:
        return f"{web_url}/-/tree/{branch}"
    if provider is Provider.bitbucket_cloud:
        return f"{web_url}/src/{branch}"
    if provider is Provider.bitbucket_datacenter:
        return f"{web_url}/browse?at=refs/heads/{branch}"
    return f"{web_url}/tree/{branch}"


def get_commits_url(provider: Provider, web_url: str, branch: str) -> str:
    branch = _quote_branch(branch)
    if provider is Provider.gitlab:
        return f"{web_url}/-/commits/{branch}"
    if provider is Provider.bitbucket_cloud:
        return f"{web_url}/commits/branch/{branch}"
    if provider is Provider.bitbucket_datacenter:
        return f"{web_url}/commits?until=refs/heads/{branch}"
    return f"{web_url}/commits/{branch}"


def get_page_url(
    page: Page, provider: Provider, web_url: str, branch: Optional[str] = None
) -> str:
    """
    Browser url of a repository page.

    Args:
        page: Page to open
        provider: SCM product of the repository's host
        web_url: Repository home page, see ``get_web_url``
        branch: Branch for branch specific pages (commits, rem)

    Returns:
        The page url
    """
    if page is Page.home:
        return web_url
    if page is Page.commits:
        return get_commits_url(provider, web_url, branch) if branch else web_url
    if page is Page.rem:
        return get_branch_url(provider, web_url, branch) if branch else web_url

    suffix = _PAGES[provider].get(page)
    return f"{web_url}/{suffix}" if suffix else web_url


def get_file_url(provider: Provider, web_url: str, branch: str, file_path: str) -> str:
    """Browser url of a file on a branch."""
    branch = _quote_branch(branch)
    file_path = quote(file_path.lstrip("/"), safe="/")
    if provider is Provider.gitlab:
        return f"{web_url}/-/blob/{branch}/{file_path}"
    if provider is Provider.bitbucket_cloud:
        return f"{web_url}/src/{branch}/{file_path}"
    if provider is Provider.bitbucket_datacenter:
        return f"{web_url}/browse/{file_path}?at=refs/heads/{branch}"
    return f"{web_url}/blob/{branch}/{file_path}"
