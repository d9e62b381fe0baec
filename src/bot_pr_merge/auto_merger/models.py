"""Data models for the auto-merger."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PullRequestState(str, Enum):
    """Lifecycle state of a pull request."""

    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class ReviewState(str, Enum):
    """State of a pull request review, reduced to what the merger cares about."""

    APPROVED = "approved"
    OTHER = "other"


class CheckConclusion(str, Enum):
    """Normalized conclusion of a single check."""

    SUCCESS = "success"
    FAILED = "failed"
    MISSING = "missing"


class Verdict(str, Enum):
    """Aggregate merge readiness of a pull request head commit."""

    READY = "ready"
    MISSING = "missing"
    FAILED = "failed"


class MergeState(str, Enum):
    """States of the merge loop."""

    SCANNING = "scanning"
    SELECTED = "selected"
    GATING = "gating"
    CHECKING = "checking"
    MERGING = "merging"
    MERGED = "merged"
    DONE = "done"
    WAITING_RETRY = "waiting_retry"
    FATAL = "fatal"
    ABORTED = "aborted"


# Raw GitHub states that count as a failure in either check subsystem.
STATUS_FAILURE_STATES = frozenset({"failure", "error"})
CHECK_RUN_FAILURE_CONCLUSIONS = frozenset(
    {"failure", "timed_out", "cancelled", "startup_failure"}
)


def check_key(context: str, app_id: int | None) -> str:
    """Build the mapping key for a check context.

    Parameters
    ----------
    context : str
        Human readable check name.
    app_id : int or None
        Identifier of the app providing the check, if known.

    Returns
    -------
    str
        ``context`` or ``context/app_id``.

    """
    if app_id is None:
        return context
    return f"{context}/{app_id}"


@dataclass
class PullRequest:
    """An open (or recently refreshed) pull request.

    Attributes
    ----------
    number : int
        Pull request number.
    author : str
        Login of the pull request author.
    title : str
        Pull request title.
    head_sha : str
        Commit SHA at the head of the pull request branch.
    head_ref : str
        Name of the pull request branch.
    base_ref : str
        Name of the branch the pull request targets.
    draft : bool
        Whether the pull request is a draft.
    mergeable : bool or None
        Mergeability reported by GitHub, None while GitHub is computing it.
    rebaseable : bool or None
        Whether GitHub can rebase the branch, None while unknown.
    state : PullRequestState
        Lifecycle state.
    node_id : str
        GraphQL node id.
    html_url : str
        Browser URL of the pull request.

    """

    number: int
    author: str
    title: str
    head_sha: str
    head_ref: str
    base_ref: str
    draft: bool = False
    mergeable: bool | None = None
    rebaseable: bool | None = None
    state: PullRequestState = PullRequestState.OPEN
    node_id: str = ""
    html_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PullRequest":
        """Build a pull request from a REST API payload."""
        if data.get("merged") or data.get("merged_at"):
            state = PullRequestState.MERGED
        elif data.get("state") == "closed":
            state = PullRequestState.CLOSED
        else:
            state = PullRequestState.OPEN

        head = data.get("head") or {}
        base = data.get("base") or {}
        user = data.get("user") or {}
        return cls(
            number=int(data["number"]),
            author=user.get("login", ""),
            title=data.get("title") or "",
            head_sha=head.get("sha", ""),
            head_ref=head.get("ref", ""),
            base_ref=base.get("ref", ""),
            draft=bool(data.get("draft", False)),
            mergeable=data.get("mergeable"),
            rebaseable=data.get("rebaseable"),
            state=state,
            node_id=data.get("node_id", ""),
            html_url=data.get("html_url", ""),
        )


@dataclass(frozen=True)
class RequiredCheck:
    """A status check that branch protection requires before merging."""

    context: str
    app_id: int | None = None

    @property
    def key(self) -> str:
        """Mapping key used when folding check results."""
        return check_key(self.context, self.app_id)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RequiredCheck":
        """Build a required check from a branch protection ``checks`` entry."""
        app_id = data.get("app_id")
        return cls(
            context=data["context"],
            app_id=int(app_id) if app_id is not None else None,
        )


@dataclass(frozen=True)
class CheckResult:
    """One check result folded from statuses or check-runs.

    Attributes
    ----------
    context : str
        Status context or check-run name.
    conclusion : CheckConclusion
        Normalized conclusion.
    app_id : int or None
        App that reported a check-run; statuses have none.
    raw : str
        The state or conclusion string GitHub reported.

    """

    context: str
    conclusion: CheckConclusion
    app_id: int | None = None
    raw: str = ""

    @property
    def key(self) -> str:
        """Context suffixed with the app id, when one is known."""
        return check_key(self.context, self.app_id)

    def matching_keys(self) -> list[str]:
        """Required check keys this result satisfies.

        A check-run matches a required check pinned to its app as well as
        one that accepts any app.
        """
        if self.app_id is None:
            return [self.context]
        return [self.key, self.context]

    @classmethod
    def from_status(cls, data: dict[str, Any]) -> "CheckResult":
        """Normalize a commit status entry."""
        state = data.get("state") or ""
        if state == "success":
            conclusion = CheckConclusion.SUCCESS
        elif state in STATUS_FAILURE_STATES:
            conclusion = CheckConclusion.FAILED
        else:
            conclusion = CheckConclusion.MISSING
        return cls(context=data.get("context", ""), conclusion=conclusion, raw=state)

    @classmethod
    def from_check_run(cls, data: dict[str, Any]) -> "CheckResult":
        """Normalize a check-run entry.

        The run's conclusion is used when set, otherwise its status
        (``queued``, ``in_progress``...).
        """
        raw = data.get("conclusion") or data.get("status") or ""
        if raw == "success":
            conclusion = CheckConclusion.SUCCESS
        elif raw in CHECK_RUN_FAILURE_CONCLUSIONS:
            conclusion = CheckConclusion.FAILED
        else:
            conclusion = CheckConclusion.MISSING

        app = data.get("app") or {}
        app_id = app.get("id")
        return cls(
            context=data.get("name", ""),
            conclusion=conclusion,
            app_id=int(app_id) if app_id is not None else None,
            raw=raw,
        )


@dataclass
class WorkflowRun:
    """A GitHub Actions workflow run."""

    id: int
    head_branch: str
    head_sha: str
    status: str
    conclusion: str | None = None
    url: str = ""
    html_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "WorkflowRun":
        """Build a workflow run from a REST API payload."""
        return cls(
            id=int(data["id"]),
            head_branch=data.get("head_branch") or "",
            head_sha=data.get("head_sha") or "",
            status=data.get("status") or "",
            conclusion=data.get("conclusion"),
            url=data.get("url", ""),
            html_url=data.get("html_url", ""),
        )


@dataclass
class Review:
    """A pull request review."""

    id: int
    state: ReviewState
    reviewer: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Review":
        """Build a review from a REST API payload."""
        state = (
            ReviewState.APPROVED
            if (data.get("state") or "").upper() == "APPROVED"
            else ReviewState.OTHER
        )
        user = data.get("user") or {}
        return cls(id=int(data["id"]), state=state, reviewer=user.get("login", ""))


@dataclass
class MergeResult:
    """Response of the merge endpoint."""

    merged: bool
    message: str = ""
    sha: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MergeResult":
        """Build a merge result from a REST API payload."""
        return cls(
            merged=bool(data.get("merged", False)),
            message=data.get("message") or "",
            sha=data.get("sha"),
        )


@dataclass(frozen=True)
class RemoteRepository:
    """Identity of the GitHub repository the merger acts on."""

    owner: str
    name: str
    default_branch: str

    @property
    def full_name(self) -> str:
        """Repository name in ``owner/name`` format."""
        return f"{self.owner}/{self.name}"
