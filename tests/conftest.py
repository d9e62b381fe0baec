"""Shared fixtures for bot-pr-merge tests."""

import pytest

from bot_pr_merge.auto_merger.errors import TransportError
from bot_pr_merge.auto_merger.models import (
    CheckConclusion,
    CheckResult,
    MergeResult,
    PullRequest,
    RemoteRepository,
    RequiredCheck,
    Review,
    ReviewState,
    WorkflowRun,
)
from bot_pr_merge.auto_merger.paging import ItemSequence, Page, PagedSequence

BOT = "renovate-bot"


def paged(items, page_size=2, metadata=None):
    """Return a fetch_page function serving ``items`` in pages."""
    items = list(items)

    def fetch(cursor):
        start = cursor or 0
        chunk = items[start : start + page_size]
        end = start + page_size
        return Page(metadata, chunk, end if end < len(items) else None)

    return fetch


def make_pr(number, author=BOT, mergeable=None, rebaseable=True, **kwargs):
    """Build a pull request with sensible defaults."""
    return PullRequest(
        number=number,
        author=author,
        title=kwargs.pop("title", f"chore(deps): update dependency {number}"),
        head_sha=kwargs.pop("head_sha", f"sha{number}"),
        head_ref=kwargs.pop("head_ref", f"renovate/dep-{number}"),
        base_ref=kwargs.pop("base_ref", "main"),
        mergeable=mergeable,
        rebaseable=rebaseable,
        **kwargs,
    )


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient.

    Merging a pull request removes it from the open list, so a run against
    this fake eventually empties the candidate set.
    """

    def __init__(self, page_size=2):
        self.page_size = page_size
        self.pulls: dict[int, PullRequest] = {}
        self.required: list[RequiredCheck] = []
        self.statuses: dict[str, list[CheckResult]] = {}
        self.check_runs: dict[str, list[CheckResult]] = {}
        self.reviews: dict[int, list[Review]] = {}
        self.workflow_runs: list[WorkflowRun] = []
        self.approved_runs: list[int] = []
        self.created_reviews: list[tuple[int, str, str]] = []
        self.merge_calls: list[tuple[int, str, str]] = []
        self.merge_response: MergeResult | None = None
        self.list_error: Exception | None = None
        self.submit_error: Exception | None = None
        self._next_review_id = 1000

    def add_pr(self, pr, passing=True):
        self.pulls[pr.number] = pr
        if passing:
            self.statuses[pr.head_sha] = [
                CheckResult(c.context, CheckConclusion.SUCCESS) for c in self.required
            ]
        return pr

    def list_pull_requests(self, owner, name, base):
        if self.list_error:
            raise self.list_error
        pulls = [pr for pr in self.pulls.values() if pr.base_ref == base]
        return ItemSequence(paged(pulls, self.page_size))

    def get_pull_request(self, owner, name, number):
        if number not in self.pulls:
            raise TransportError(f"pull request {number} not found")
        return self.pulls[number]

    def list_reviews(self, owner, name, number):
        return ItemSequence(paged(self.reviews.get(number, []), self.page_size))

    def create_review(self, owner, name, number, commit_id, body):
        self._next_review_id += 1
        review = Review(id=self._next_review_id, state=ReviewState.OTHER)
        self.reviews.setdefault(number, []).append(review)
        self.created_reviews.append((number, commit_id, body))
        return review

    def submit_review(self, owner, name, number, review_id, body, event="APPROVE"):
        if self.submit_error:
            raise self.submit_error
        for review in self.reviews.get(number, []):
            if review.id == review_id:
                review.state = ReviewState.APPROVED
                return review
        raise TransportError(f"review {review_id} not found")

    def get_required_checks(self, owner, name, branch):
        return list(self.required)

    def list_commit_statuses(self, owner, name, ref):
        return PagedSequence(
            paged(self.statuses.get(ref, []), self.page_size, metadata="success")
        )

    def list_check_runs(self, owner, name, ref):
        runs = self.check_runs.get(ref, [])
        return PagedSequence(paged(runs, self.page_size, metadata=len(runs)))

    def list_workflow_runs(self, owner, name, event, status, branch):
        runs = [
            run
            for run in self.workflow_runs
            if run.status == status and run.head_branch == branch
        ]
        return ItemSequence(paged(runs, self.page_size))

    def approve_workflow_run(self, owner, name, run_id):
        self.approved_runs.append(run_id)

    def merge_pull_request(
        self, owner, name, number, commit_title, merge_method="squash"
    ):
        self.merge_calls.append((number, commit_title, merge_method))
        if self.merge_response is not None:
            return self.merge_response
        del self.pulls[number]
        return MergeResult(merged=True, message="Pull Request successfully merged")


@pytest.fixture
def repo():
    """Repository identity used across tests."""
    return RemoteRepository(owner="acme", name="widgets", default_branch="main")


@pytest.fixture
def fake_client():
    """Empty in-memory GitHub with one required check."""
    client = FakeGitHubClient()
    client.required = [RequiredCheck("ci/build")]
    return client
