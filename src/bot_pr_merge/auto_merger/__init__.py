"""Auto-merger for dependency-update bot pull requests."""

from .approval_gate import ApprovalGate
from .check_aggregator import CheckAggregator, CheckReport
from .github_client import GitHubClient
from .merge_executor import MergeExecutor
from .models import MergeState, PullRequest, RemoteRepository, Verdict
from .orchestrator import MergeOrchestrator, MergeRunSummary
from .paging import ItemSequence, Page, PagedSequence

__all__ = [
    "MergeOrchestrator",
    "MergeRunSummary",
    "ApprovalGate",
    "CheckAggregator",
    "CheckReport",
    "MergeExecutor",
    "GitHubClient",
    "MergeState",
    "PullRequest",
    "RemoteRepository",
    "Verdict",
    "PagedSequence",
    "ItemSequence",
    "Page",
]
