"""GitHub REST client built on ``gh api``."""

import json
import os
import subprocess
from collections.abc import Callable
from typing import Any

from .errors import TransportError
from .models import (
    CheckResult,
    MergeResult,
    PullRequest,
    RemoteRepository,
    RequiredCheck,
    Review,
    WorkflowRun,
)
from .paging import ItemSequence, Page, PagedSequence

PER_PAGE = 100


class GitHubClient:
    """Call the GitHub REST API through the gh CLI.

    Parameters
    ----------
    gh_token : str or None, optional
        GitHub token passed to gh as ``GH_TOKEN``. If None, gh uses its own
        stored credentials.
    timeout : float, optional
        Seconds to wait for a single gh invocation (default=60).
    per_page : int, optional
        Page size requested from listing endpoints (default=100).

    Attributes
    ----------
    gh_token : str or None
        GitHub token.
    timeout : float
        Per-call timeout in seconds.
    per_page : int
        Listing page size.

    """

    def __init__(
        self,
        gh_token: str | None = None,
        timeout: float = 60.0,
        per_page: int = PER_PAGE,
    ):
        """Initialize the client.

        Parameters
        ----------
        gh_token : str or None, optional
            GitHub token passed to gh as ``GH_TOKEN``.
        timeout : float, optional
            Seconds to wait for a single gh invocation (default=60).
        per_page : int, optional
            Page size requested from listing endpoints (default=100).

        """
        self.gh_token = gh_token
        self.timeout = timeout
        self.per_page = per_page

    def _run_gh_command(self, cmd: list[str], stdin: str | None = None) -> str:
        """Execute gh CLI command.

        Parameters
        ----------
        cmd : list[str]
            Command and arguments to execute.
        stdin : str or None, optional
            Text written to the command's standard input.

        Returns
        -------
        str
            Stripped stdout from command.

        Raises
        ------
        TransportError
            If the command cannot be run, times out or exits non-zero.

        """
        # Inherit environment and add GH_TOKEN
        env = os.environ.copy()
        if self.gh_token:
            env["GH_TOKEN"] = self.gh_token

        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=True,
                env=env,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            raise TransportError(
                f"{' '.join(cmd[:3])} exited with status {e.returncode}",
                command=cmd,
                stderr=e.stderr or e.stdout or "",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise TransportError(
                f"{' '.join(cmd[:3])} timed out after {self.timeout}s", command=cmd
            ) from e
        except FileNotFoundError as e:
            raise TransportError("gh CLI is not installed", command=cmd) from e
        except OSError as e:
            raise TransportError(f"Unable to run gh: {e}", command=cmd) from e
        return result.stdout.strip()

    def _api(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Call a REST endpoint and decode the JSON response.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            API path without a leading slash (e.g. ``repos/o/r/pulls``).
        params : dict or None, optional
            Query parameters, sent as gh ``-f`` fields on a GET.
        body : dict or None, optional
            JSON request body.

        Returns
        -------
        Any
            Decoded response, or None for an empty body.

        Raises
        ------
        TransportError
            If the call fails or the response is not JSON.

        """
        cmd = ["gh", "api", "-X", method, path]
        for key, value in (params or {}).items():
            cmd.extend(["-f", f"{key}={value}"])

        stdin = None
        if body is not None:
            cmd.extend(["--input", "-"])
            stdin = json.dumps(body)

        output = self._run_gh_command(cmd, stdin=stdin)
        if not output:
            return None
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise TransportError(f"Malformed response from {path}: {e}") from e

    def _parse(
        self, parse: Callable[[dict[str, Any]], Any], data: Any, path: str
    ) -> Any:
        """Convert a response payload, treating unexpected shapes as transport errors."""
        try:
            return parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed response from {path}: {e!r}") from e

    def _parse_page(
        self,
        data: Any,
        page: int,
        item_key: str | None,
        metadata: Callable[[dict[str, Any]], Any] | None,
    ) -> tuple[list[Any], bool, Any]:
        """Split a listing response into raw items, a has-more flag and metadata."""
        if item_key is None:
            raw_items = data or []
            if not isinstance(raw_items, list):
                raise TypeError(f"expected a list, got {type(raw_items).__name__}")
            return raw_items, len(raw_items) >= self.per_page, None

        data = data or {}
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        raw_items = data.get(item_key) or []
        if not isinstance(raw_items, list):
            raise TypeError(f"{item_key} is not a list")
        total = data.get("total_count")
        if total is None:
            has_more = len(raw_items) >= self.per_page
        else:
            total = int(total)
            seen = (page - 1) * self.per_page + len(raw_items)
            has_more = bool(raw_items) and seen < total
        return raw_items, has_more, metadata(data) if metadata else None

    def _fetch_page(
        self,
        path: str,
        params: dict[str, Any],
        parse: Callable[[dict[str, Any]], Any],
        item_key: str | None = None,
        metadata: Callable[[dict[str, Any]], Any] | None = None,
    ) -> Callable[[int | None], Page]:
        """Build a ``fetch_page`` callable for a listing endpoint.

        Bare list responses have another page when the page came back full.
        Wrapped responses (``{"total_count": n, item_key: [...]}``) have
        another page while fewer than ``total_count`` items have been seen.
        """

        def fetch(cursor: int | None) -> Page:
            page = cursor or 1
            data = self._api(
                "GET",
                path,
                params={**params, "per_page": self.per_page, "page": page},
            )
            raw_items, has_more, meta = self._parse(
                lambda body: self._parse_page(body, page, item_key, metadata),
                data,
                path,
            )

            return Page(
                metadata=meta,
                items=[self._parse(parse, item, path) for item in raw_items],
                next_cursor=page + 1 if has_more else None,
            )

        return fetch

    def get_repository(self, owner: str, name: str) -> RemoteRepository:
        """Fetch a repository and its default branch."""
        path = f"repos/{owner}/{name}"
        return self._parse(
            lambda data: RemoteRepository(
                owner=data["owner"]["login"],
                name=data["name"],
                default_branch=data["default_branch"],
            ),
            self._api("GET", path),
            path,
        )

    def list_pull_requests(
        self, owner: str, name: str, base: str
    ) -> ItemSequence[PullRequest]:
        """List open pull requests targeting ``base``, oldest first."""
        return ItemSequence(
            self._fetch_page(
                f"repos/{owner}/{name}/pulls",
                {"state": "open", "sort": "created", "direction": "asc", "base": base},
                PullRequest.from_api,
            )
        )

    def get_pull_request(self, owner: str, name: str, number: int) -> PullRequest:
        """Fetch a single pull request."""
        path = f"repos/{owner}/{name}/pulls/{number}"
        return self._parse(PullRequest.from_api, self._api("GET", path), path)

    def list_reviews(self, owner: str, name: str, number: int) -> ItemSequence[Review]:
        """List reviews of a pull request."""
        return ItemSequence(
            self._fetch_page(
                f"repos/{owner}/{name}/pulls/{number}/reviews", {}, Review.from_api
            )
        )

    def create_review(
        self, owner: str, name: str, number: int, commit_id: str, body: str
    ) -> Review:
        """Create a pending review on ``commit_id``."""
        path = f"repos/{owner}/{name}/pulls/{number}/reviews"
        data = self._api("POST", path, body={"commit_id": commit_id, "body": body})
        return self._parse(Review.from_api, data, path)

    def submit_review(
        self,
        owner: str,
        name: str,
        number: int,
        review_id: int,
        body: str,
        event: str = "APPROVE",
    ) -> Review:
        """Submit a pending review with ``event``."""
        path = f"repos/{owner}/{name}/pulls/{number}/reviews/{review_id}/events"
        data = self._api("POST", path, body={"body": body, "event": event})
        return self._parse(Review.from_api, data, path)

    def get_required_checks(
        self, owner: str, name: str, branch: str
    ) -> list[RequiredCheck]:
        """Return the status checks branch protection requires on ``branch``."""
        path = (
            f"repos/{owner}/{name}/branches/{branch}/protection/required_status_checks"
        )
        data = self._api("GET", path)
        return self._parse(self._required_checks_from_api, data, path)

    @staticmethod
    def _required_checks_from_api(data: Any) -> list[RequiredCheck]:
        data = data or {}
        checks = data.get("checks")
        if checks is None:
            # Older protection rules only carry bare contexts.
            return [RequiredCheck(context=str(c)) for c in data.get("contexts") or []]
        return [RequiredCheck.from_api(c) for c in checks]

    def list_commit_statuses(
        self, owner: str, name: str, ref: str
    ) -> PagedSequence[str, CheckResult]:
        """List commit statuses of ``ref``; metadata is the combined state."""
        return PagedSequence(
            self._fetch_page(
                f"repos/{owner}/{name}/commits/{ref}/status",
                {},
                CheckResult.from_status,
                item_key="statuses",
                metadata=lambda data: data.get("state", ""),
            )
        )

    def list_check_runs(
        self, owner: str, name: str, ref: str
    ) -> PagedSequence[int, CheckResult]:
        """List check-runs of ``ref``; metadata is the total count."""
        return PagedSequence(
            self._fetch_page(
                f"repos/{owner}/{name}/commits/{ref}/check-runs",
                {},
                CheckResult.from_check_run,
                item_key="check_runs",
                metadata=lambda data: int(data.get("total_count", 0)),
            )
        )

    def list_workflow_runs(
        self, owner: str, name: str, event: str, status: str, branch: str
    ) -> ItemSequence[WorkflowRun]:
        """List workflow runs filtered by event, status and branch."""
        return ItemSequence(
            self._fetch_page(
                f"repos/{owner}/{name}/actions/runs",
                {"event": event, "status": status, "branch": branch},
                WorkflowRun.from_api,
                item_key="workflow_runs",
            )
        )

    def approve_workflow_run(self, owner: str, name: str, run_id: int) -> None:
        """Approve a workflow run waiting for maintainer approval."""
        self._api("POST", f"repos/{owner}/{name}/actions/runs/{run_id}/approve")

    def merge_pull_request(
        self,
        owner: str,
        name: str,
        number: int,
        commit_title: str,
        merge_method: str = "squash",
    ) -> MergeResult:
        """Merge a pull request."""
        path = f"repos/{owner}/{name}/pulls/{number}/merge"
        data = self._api(
            "PUT",
            path,
            body={"merge_method": merge_method, "commit_title": commit_title},
        )
        return self._parse(MergeResult.from_api, data or {}, path)
