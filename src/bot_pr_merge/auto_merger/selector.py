"""Choosing which bot pull request to work on."""

from collections.abc import Iterable

from rich.markup import escape

from ..utils.logging import log_info
from .models import PullRequest


def filter_bot_pull_requests(
    pulls: Iterable[PullRequest], bot_login: str
) -> list[PullRequest]:
    """Keep the pull requests authored by ``bot_login``, preserving order.

    Errors raised while iterating ``pulls`` propagate.
    """
    return [pr for pr in pulls if pr.author == bot_login]


def choose_active_pull_request(candidates: list[PullRequest]) -> PullRequest | None:
    """Pick the pull request to act on.

    The last candidate GitHub reports as mergeable wins. When none is known
    to be mergeable the first (oldest) candidate is returned anyway, so that
    the check evaluation produces a concrete, retryable failure.

    Parameters
    ----------
    candidates : list[PullRequest]
        Bot pull requests in the order GitHub listed them.

    Returns
    -------
    PullRequest or None
        The chosen pull request, or None if there are no candidates.

    """
    if not candidates:
        return None

    active = None
    for pr in candidates:
        log_info(f"  #{pr.number:<4} {pr.author} {escape(pr.title)}")
        if pr.mergeable is True:
            active = pr

    if active is None:
        active = candidates[0]
    return active
