"""Tests for auto-merger data models."""

import pytest

from bot_pr_merge.auto_merger.models import (
    CheckConclusion,
    CheckResult,
    MergeResult,
    PullRequest,
    PullRequestState,
    RemoteRepository,
    RequiredCheck,
    Review,
    ReviewState,
    WorkflowRun,
    check_key,
)


class TestCheckKey:
    """Test check_key helper."""

    def test_without_app_id(self):
        """Test that a missing app id leaves the context unchanged."""
        assert check_key("ci/build", None) == "ci/build"

    def test_with_app_id(self):
        """Test that the app id is appended."""
        assert check_key("build", 15368) == "build/15368"


class TestCheckResultFromStatus:
    """Test commit status normalization."""

    @pytest.mark.parametrize(
        ("state", "expected"),
        [
            ("success", CheckConclusion.SUCCESS),
            ("failure", CheckConclusion.FAILED),
            ("error", CheckConclusion.FAILED),
            ("pending", CheckConclusion.MISSING),
            ("", CheckConclusion.MISSING),
        ],
    )
    def test_state_mapping(self, state, expected):
        """Test each raw status state maps to its conclusion."""
        result = CheckResult.from_status({"context": "ci/build", "state": state})

        assert result.conclusion == expected
        assert result.raw == state
        assert result.app_id is None
        assert result.key == "ci/build"


class TestCheckResultFromCheckRun:
    """Test check-run normalization."""

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            ({"status": "completed", "conclusion": "success"}, CheckConclusion.SUCCESS),
            ({"status": "completed", "conclusion": "failure"}, CheckConclusion.FAILED),
            ({"status": "completed", "conclusion": "timed_out"}, CheckConclusion.FAILED),
            ({"status": "completed", "conclusion": "cancelled"}, CheckConclusion.FAILED),
            ({"status": "completed", "conclusion": "neutral"}, CheckConclusion.MISSING),
            ({"status": "completed", "conclusion": "skipped"}, CheckConclusion.MISSING),
            ({"status": "in_progress", "conclusion": None}, CheckConclusion.MISSING),
            ({"status": "queued"}, CheckConclusion.MISSING),
        ],
    )
    def test_conclusion_mapping(self, payload, expected):
        """Test each raw conclusion or status maps to its conclusion."""
        result = CheckResult.from_check_run(
            {"name": "build", "app": {"id": 15368}, **payload}
        )

        assert result.conclusion == expected

    def test_app_id_is_part_of_key(self):
        """Test that check-run keys carry the app id."""
        result = CheckResult.from_check_run(
            {"name": "build", "conclusion": "success", "app": {"id": 15368}}
        )

        assert result.app_id == 15368
        assert result.key == "build/15368"
        assert result.matching_keys() == ["build/15368", "build"]

    def test_missing_app(self):
        """Test that a check-run without app info falls back to its name."""
        result = CheckResult.from_check_run({"name": "build", "conclusion": "success"})

        assert result.app_id is None
        assert result.matching_keys() == ["build"]


class TestRequiredCheck:
    """Test RequiredCheck."""

    def test_from_api_with_app(self):
        """Test parsing a protection entry pinned to an app."""
        check = RequiredCheck.from_api({"context": "build", "app_id": 15368})

        assert check.key == "build/15368"

    def test_from_api_without_app(self):
        """Test parsing a protection entry that accepts any source."""
        check = RequiredCheck.from_api({"context": "ci/build", "app_id": None})

        assert check.app_id is None
        assert check.key == "ci/build"

    def test_from_api_missing_context_raises(self):
        """Test that an entry without context is rejected."""
        with pytest.raises(KeyError):
            RequiredCheck.from_api({"app_id": 1})


class TestPullRequestFromApi:
    """Test PullRequest.from_api."""

    def _payload(self, **overrides):
        data = {
            "number": 42,
            "title": "chore(deps): update dependency rich to v14",
            "state": "open",
            "draft": False,
            "mergeable": True,
            "rebaseable": True,
            "node_id": "PR_kwDO",
            "html_url": "https://github.com/acme/widgets/pull/42",
            "user": {"login": "renovate-bot"},
            "head": {"sha": "abc123", "ref": "renovate/rich-14.x"},
            "base": {"ref": "main"},
        }
        data.update(overrides)
        return data

    def test_parses_fields(self):
        """Test that all fields are read from the payload."""
        pr = PullRequest.from_api(self._payload())

        assert pr.number == 42
        assert pr.author == "renovate-bot"
        assert pr.head_sha == "abc123"
        assert pr.head_ref == "renovate/rich-14.x"
        assert pr.base_ref == "main"
        assert pr.mergeable is True
        assert pr.rebaseable is True
        assert pr.state == PullRequestState.OPEN

    def test_unknown_mergeability_stays_none(self):
        """Test that mergeable is None while GitHub computes it."""
        pr = PullRequest.from_api(self._payload(mergeable=None, rebaseable=None))

        assert pr.mergeable is None
        assert pr.rebaseable is None

    def test_merged_state(self):
        """Test that a merged pull request is reported as merged."""
        pr = PullRequest.from_api(
            self._payload(state="closed", merged_at="2026-01-01T00:00:00Z")
        )

        assert pr.state == PullRequestState.MERGED

    def test_closed_state(self):
        """Test that a closed, unmerged pull request is reported as closed."""
        pr = PullRequest.from_api(self._payload(state="closed", merged_at=None))

        assert pr.state == PullRequestState.CLOSED


class TestOtherModels:
    """Test the smaller API models."""

    def test_review_approved(self):
        """Test that APPROVED reviews are recognized."""
        review = Review.from_api(
            {"id": 7, "state": "APPROVED", "user": {"login": "maintainer"}}
        )

        assert review.state == ReviewState.APPROVED
        assert review.reviewer == "maintainer"

    @pytest.mark.parametrize(
        "state", ["PENDING", "COMMENTED", "CHANGES_REQUESTED", "DISMISSED"]
    )
    def test_review_other_states(self, state):
        """Test that every other review state is not an approval."""
        assert Review.from_api({"id": 7, "state": state}).state == ReviewState.OTHER

    def test_workflow_run(self):
        """Test parsing a workflow run."""
        run = WorkflowRun.from_api(
            {
                "id": 99,
                "head_branch": "renovate/rich-14.x",
                "head_sha": "abc123",
                "status": "action_required",
                "conclusion": None,
            }
        )

        assert run.id == 99
        assert run.status == "action_required"
        assert run.conclusion is None

    def test_merge_result_defaults(self):
        """Test that an empty merge payload means not merged."""
        result = MergeResult.from_api({})

        assert result.merged is False
        assert result.sha is None

    def test_repository_full_name(self):
        """Test the owner/name rendering."""
        repo = RemoteRepository(owner="acme", name="widgets", default_branch="main")

        assert repo.full_name == "acme/widgets"
