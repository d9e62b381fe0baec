"""Approvals needed before a bot pull request can merge."""

from ..utils.logging import log_info, log_success
from .github_client import GitHubClient
from .models import PullRequest, RemoteRepository, Review, ReviewState, WorkflowRun

DEFAULT_APPROVAL_MESSAGE = "LGTM"


class ApprovalGate:
    """Approve blocked workflow runs and the pull request itself.

    Both operations are idempotent: running them again against a pull
    request that is already approved does nothing.

    Parameters
    ----------
    client : GitHubClient
        Client for GitHub operations.
    repo : RemoteRepository
        Repository the pull requests belong to.
    approval_message : str, optional
        Body of the approving review (default="LGTM").

    """

    def __init__(
        self,
        client: GitHubClient,
        repo: RemoteRepository,
        approval_message: str = DEFAULT_APPROVAL_MESSAGE,
    ):
        self.client = client
        self.repo = repo
        self.approval_message = approval_message

    def approve_workflow_runs(self, pr: PullRequest) -> list[WorkflowRun]:
        """Approve workflow runs on ``pr``'s head commit that await approval.

        Runs on the same branch but for an older commit are left alone.

        Parameters
        ----------
        pr : PullRequest
            Active pull request.

        Returns
        -------
        list[WorkflowRun]
            Runs that were approved.

        Raises
        ------
        TransportError
            If listing or approving fails.

        """
        approved = []
        runs = self.client.list_workflow_runs(
            self.repo.owner,
            self.repo.name,
            event="pull_request",
            status="action_required",
            branch=pr.head_ref,
        )
        for run in runs:
            if run.head_sha != pr.head_sha:
                continue
            log_info(f"  Approving run: {run.html_url or run.url} ({run.head_branch})")
            self.client.approve_workflow_run(self.repo.owner, self.repo.name, run.id)
            approved.append(run)
        return approved

    def approve_pull_request(self, pr: PullRequest) -> Review | None:
        """Submit an approving review unless one already exists.

        The review is created pending on the head commit and then submitted.
        If submission fails the pending review is left as is and the error
        propagates.

        Parameters
        ----------
        pr : PullRequest
            Active pull request.

        Returns
        -------
        Review or None
            The submitted review, or None if the pull request was already
            approved.

        Raises
        ------
        TransportError
            If listing, creating or submitting the review fails.

        """
        reviews = self.client.list_reviews(self.repo.owner, self.repo.name, pr.number)
        if any(review.state == ReviewState.APPROVED for review in reviews):
            return None

        log_info(f"Approving PR #{pr.number} with {self.approval_message} message.")
        pending = self.client.create_review(
            self.repo.owner,
            self.repo.name,
            pr.number,
            commit_id=pr.head_sha,
            body=self.approval_message,
        )
        review = self.client.submit_review(
            self.repo.owner,
            self.repo.name,
            pr.number,
            pending.id,
            body=self.approval_message,
            event="APPROVE",
        )
        log_success(f"  Approved {self.repo.full_name}#{pr.number}")
        return review
