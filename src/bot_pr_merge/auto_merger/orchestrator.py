"""Merge loop that clears bot pull requests one at a time."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from rich.markup import escape

from ..config import MergeSettings
from ..utils.logging import log_error, log_info, log_success, log_warning
from .approval_gate import ApprovalGate
from .check_aggregator import CheckAggregator
from .errors import FailedCheckError, MergeBotError, TransportError
from .github_client import GitHubClient
from .merge_executor import MergeExecutor
from .models import MergeState, PullRequest, RemoteRepository
from .selector import choose_active_pull_request, filter_bot_pull_requests


@dataclass
class StepResult:
    """Outcome of one merge step.

    Attributes
    ----------
    state : MergeState
        One of MERGED, DONE, WAITING_RETRY or FATAL.
    pr : PullRequest or None
        The active pull request, if one was selected.
    error : Exception or None
        Error that ended the step.
    phase : MergeState or None
        State the step was in when the error occurred.

    """

    state: MergeState
    pr: PullRequest | None = None
    error: Exception | None = None
    phase: MergeState | None = None


@dataclass
class MergeRunSummary:
    """Outcome of a full merge run."""

    state: MergeState
    iterations: int
    merged: list[int] = field(default_factory=list)
    last_error: Exception | None = None

    @property
    def ok(self) -> bool:
        """True when the run ended because no bot pull requests remain."""
        return self.state == MergeState.DONE


class MergeOrchestrator:
    """Repeatedly merge the oldest eligible bot pull request.

    Pull requests are processed strictly one after another: a candidate is
    gated, checked, approved and merged before the next one is selected.

    Parameters
    ----------
    client : GitHubClient
        Client for GitHub operations.
    repo : RemoteRepository
        Repository to clear.
    settings : MergeSettings, optional
        Loop tunables. Defaults are used if omitted.
    sleep : Callable[[float], None], optional
        Function used to wait between failed steps (default=time.sleep).

    Attributes
    ----------
    approval_gate : ApprovalGate
        Approves workflow runs and reviews.
    check_aggregator : CheckAggregator
        Computes the check verdict.
    merge_executor : MergeExecutor
        Performs the merge.

    """

    def __init__(
        self,
        client: GitHubClient,
        repo: RemoteRepository,
        settings: MergeSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.repo = repo
        self.settings = settings or MergeSettings()
        self.sleep = sleep
        self.approval_gate = ApprovalGate(
            client, repo, approval_message=self.settings.approval_message
        )
        self.check_aggregator = CheckAggregator(client, repo)
        self.merge_executor = MergeExecutor(client, repo)

    def list_candidates(self) -> list[PullRequest]:
        """List open bot pull requests against the default branch, oldest first."""
        pulls = self.client.list_pull_requests(
            self.repo.owner, self.repo.name, base=self.repo.default_branch
        )
        return filter_bot_pull_requests(pulls, self.settings.bot_login)

    def step(self) -> StepResult:
        """Attempt to merge one bot pull request.

        Returns
        -------
        StepResult
            MERGED when a pull request was merged, DONE when there is nothing
            left to merge, WAITING_RETRY after a transient failure and FATAL
            when the run should stop.

        """
        log_info(
            f"Listing {self.settings.bot_login} PRs for {self.repo.full_name} "
            f"targeting branch {self.repo.default_branch}"
        )
        try:
            candidates = self.list_candidates()
        except TransportError as e:
            return StepResult(MergeState.FATAL, error=e, phase=MergeState.SCANNING)

        pr = choose_active_pull_request(candidates)
        if pr is None:
            log_info(f"No open {self.settings.bot_login} PRs.")
            return StepResult(MergeState.DONE)

        log_info(f"Active PR: #{pr.number} {escape(pr.title)}")

        try:
            phase = MergeState.GATING
            self.approval_gate.approve_workflow_runs(pr)

            phase = MergeState.CHECKING
            self.check_aggregator.require_ready(pr, self.repo.default_branch)

            phase = MergeState.GATING
            self.approval_gate.approve_pull_request(pr)

            phase = MergeState.MERGING
            self.merge_executor.merge(pr)
        except FailedCheckError as e:
            return StepResult(MergeState.FATAL, pr=pr, error=e, phase=phase)
        except MergeBotError as e:
            return StepResult(MergeState.WAITING_RETRY, pr=pr, error=e, phase=phase)
        except Exception as e:
            log_warning(f"Unexpected {type(e).__name__} on #{pr.number}")
            return StepResult(MergeState.WAITING_RETRY, pr=pr, error=e, phase=phase)

        return StepResult(MergeState.MERGED, pr=pr)

    def run(self) -> MergeRunSummary:
        """Merge bot pull requests until none remain or the run gives up.

        The run stops when no bot pull requests are left (DONE), when a
        required check failed or the pull requests cannot be listed (FATAL),
        or after too many consecutive failures or steps (ABORTED).

        Returns
        -------
        MergeRunSummary
            Final state, step count, merged pull request numbers and the
            error of the last step.

        """
        max_iterations = self.settings.max_iterations
        max_failures = self.settings.max_consecutive_failures
        failures = 0
        merged: list[int] = []
        last_error: Exception | None = None

        for iteration in range(1, max_iterations + 1):
            log_info(f"Merge bot PRs iteration {iteration}")
            result = self.step()
            last_error = result.error

            if result.state == MergeState.DONE:
                log_success("No more work to do")
                return MergeRunSummary(MergeState.DONE, iteration, merged)

            if result.state == MergeState.FATAL:
                log_error(f"Error: {escape(str(result.error))}")
                return MergeRunSummary(MergeState.FATAL, iteration, merged, last_error)

            if result.state == MergeState.MERGED:
                failures = 0
                merged.append(result.pr.number)
                log_success("Successfully merged PR. Attempting to merge another...")
                continue

            failures += 1
            log_warning(
                f"Error while {result.phase.value if result.phase else 'working'}: "
                f"{escape(str(result.error))}"
            )
            if failures >= max_failures:
                log_error(f"Giving up after {failures} consecutive failures")
                return MergeRunSummary(
                    MergeState.ABORTED, iteration, merged, last_error
                )
            if iteration < max_iterations:
                log_info(
                    f"Sleeping for {self.settings.retry_interval:g}s "
                    "before trying again..."
                )
                self.sleep(self.settings.retry_interval)

        log_warning(f"Stopped after {max_iterations} iterations")
        return MergeRunSummary(MergeState.ABORTED, max_iterations, merged, last_error)
