"""Squash merging of the active pull request."""

from rich.markup import escape

from ..utils.logging import log_info, log_success
from .errors import MergeError, PreconditionError
from .github_client import GitHubClient
from .models import MergeResult, PullRequest, RemoteRepository


class MergeExecutor:
    """Merge a pull request after re-checking that GitHub can squash it.

    Parameters
    ----------
    client : GitHubClient
        Client for GitHub operations.
    repo : RemoteRepository
        Repository the pull requests belong to.

    """

    def __init__(self, client: GitHubClient, repo: RemoteRepository):
        self.client = client
        self.repo = repo

    def merge(self, pr: PullRequest) -> MergeResult:
        """Squash merge ``pr`` using its current title as the commit title.

        Parameters
        ----------
        pr : PullRequest
            Pull request selected earlier in the step. It is fetched again
            because its state may have changed since.

        Returns
        -------
        MergeResult
            Result reported by GitHub, with ``merged`` set.

        Raises
        ------
        PreconditionError
            If the refreshed pull request is not rebaseable.
        MergeError
            If GitHub answered without merging.
        TransportError
            If a call to GitHub fails.

        """
        log_info(f"Attempting to merge #{pr.number} {escape(pr.title)}")
        current = self.client.get_pull_request(self.repo.owner, self.repo.name, pr.number)

        if current.rebaseable is not True:
            raise PreconditionError(
                f"unable to merge #{current.number} via squash method, "
                "it is not rebaseable"
            )

        result = self.client.merge_pull_request(
            self.repo.owner,
            self.repo.name,
            current.number,
            commit_title=current.title,
            merge_method="squash",
        )
        log_info(f"  merged: {result.merged}, {escape(result.message)}")
        if not result.merged:
            raise MergeError(current.number, result.message)

        log_success(f"  Merged {self.repo.full_name}#{current.number}")
        return result
