"""Repository definition install and removal."""

from __future__ import annotations

from collections.abc import Sequence

from fedimg.containers import ContainerT as C
from fedimg.errors import FedimgError, FetchError
from fedimg.fetch import Fetcher, http_get
from fedimg.models import Repo
from fedimg.policy import BuildPaths


def install_repos(
    container: C,
    repos: Sequence[Repo],
    *,
    fetcher: Fetcher = http_get,
    paths: BuildPaths | None = None,
) -> C:
    """Fetch every repo definition and write it into the repository directory."""
    paths = paths or BuildPaths()
    for repo in repos:
        try:
            payload = fetcher(repo.url)
            contents = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FetchError(
                "Repository definition is not valid UTF-8.",
                context={"operation": "install_repos", "repo": repo.file_name, "url": repo.url},
            ) from exc
        except FedimgError as exc:
            raise exc.annotate(repo=repo.file_name)
        container = container.with_new_file(
            paths.repo_path(repo.file_name),
            contents,
            permissions=paths.repo_file_permissions,
            owner=paths.repo_file_owner,
        )
    return container


def remove_repos(container: C, repos: Sequence[Repo], *, paths: BuildPaths | None = None) -> C:
    """Delete every repo definition not marked ``keep`` in one command."""
    paths = paths or BuildPaths()
    targets = [paths.repo_path(repo.file_name) for repo in repos if not repo.keep]
    if not targets:
        return container
    return container.with_exec(["rm", "-f", *targets])
