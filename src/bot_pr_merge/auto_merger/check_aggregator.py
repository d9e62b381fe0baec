"""Required check evaluation for a pull request head commit.

GitHub reports checks through two unrelated APIs: commit statuses and
check-runs. A required check may show up in either or both, so both streams
are folded into one mapping keyed by the required check's context.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from rich.markup import escape

from ..utils.logging import log_info
from .errors import FailedCheckError, MissingCheckError
from .github_client import GitHubClient
from .models import (
    CheckConclusion,
    CheckResult,
    PullRequest,
    RemoteRepository,
    RequiredCheck,
    Verdict,
)


def fold_check_results(
    required: Iterable[RequiredCheck],
    statuses: Iterable[CheckResult],
    check_runs: Iterable[CheckResult],
) -> dict[str, CheckConclusion]:
    """Fold both result streams onto the required checks.

    Every required key starts as missing. Statuses are applied first, then
    check-runs, so a check-run overrides a status for the same key. Results
    for contexts that are not required are ignored. A check-run reported by
    an app satisfies both a required check pinned to that app and one that
    accepts any app.

    Parameters
    ----------
    required : Iterable[RequiredCheck]
        Checks required by branch protection.
    statuses : Iterable[CheckResult]
        Commit statuses, in the order GitHub returned them.
    check_runs : Iterable[CheckResult]
        Check-runs, in the order GitHub returned them.

    Returns
    -------
    dict[str, CheckConclusion]
        Conclusion per required check key.

    """
    results = {check.key: CheckConclusion.MISSING for check in required}

    for result in statuses:
        if result.key in results:
            results[result.key] = result.conclusion

    for result in check_runs:
        for key in result.matching_keys():
            if key in results:
                results[key] = result.conclusion

    return results


def classify_results(results: dict[str, CheckConclusion]) -> Verdict:
    """Reduce folded results to a single verdict.

    Any failure wins over anything else. An empty mapping is never ready.
    """
    conclusions = set(results.values())
    if CheckConclusion.FAILED in conclusions:
        return Verdict.FAILED
    if not results or conclusions != {CheckConclusion.SUCCESS}:
        return Verdict.MISSING
    return Verdict.READY


@dataclass
class CheckReport:
    """Verdict for a head commit together with the per-check conclusions."""

    verdict: Verdict
    results: dict[str, CheckConclusion] = field(default_factory=dict)

    def checks_with(self, conclusion: CheckConclusion) -> list[str]:
        """Return the keys of checks that ended with ``conclusion``."""
        return [key for key, value in self.results.items() if value == conclusion]


class CheckAggregator:
    """Compute merge readiness from required checks, statuses and check-runs.

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

    def evaluate(self, pr: PullRequest, base_branch: str) -> CheckReport:
        """Evaluate the checks of ``pr``'s head commit.

        Parameters
        ----------
        pr : PullRequest
            Pull request to evaluate.
        base_branch : str
            Branch whose protection rules define the required checks.

        Returns
        -------
        CheckReport
            Verdict and per-check conclusions.

        Raises
        ------
        TransportError
            If any of the three listings fails.

        """
        owner, name = self.repo.owner, self.repo.name
        required = self.client.get_required_checks(owner, name, base_branch)
        statuses = [
            status
            for _, status in self.client.list_commit_statuses(owner, name, pr.head_sha)
        ]
        check_runs = [
            run for _, run in self.client.list_check_runs(owner, name, pr.head_sha)
        ]

        results = fold_check_results(required, statuses, check_runs)
        for context, conclusion in results.items():
            log_info(f"  required check {escape(context)}: {conclusion.value}")

        return CheckReport(verdict=classify_results(results), results=results)

    def require_ready(self, pr: PullRequest, base_branch: str) -> CheckReport:
        """Evaluate ``pr`` and raise unless every required check passed.

        Raises
        ------
        FailedCheckError
            If any required check failed.
        MissingCheckError
            If any required check has not succeeded yet, or none are required.

        """
        report = self.evaluate(pr, base_branch)
        if report.verdict == Verdict.FAILED:
            raise FailedCheckError(report.checks_with(CheckConclusion.FAILED))
        if report.verdict == Verdict.MISSING:
            raise MissingCheckError(report.checks_with(CheckConclusion.MISSING))
        return report
