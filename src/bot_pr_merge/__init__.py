"""Bot PR Merge - approve and merge dependency-update bot pull requests."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bot-pr-merge")
except PackageNotFoundError:
    # Package not installed, use fallback
    __version__ = "0.1.0.dev"

from .auto_merger import (
    GitHubClient,
    MergeOrchestrator,
    MergeRunSummary,
    MergeState,
    RemoteRepository,
)
from .config import MergeSettings, load_settings

__all__ = [
    "GitHubClient",
    "MergeOrchestrator",
    "MergeRunSummary",
    "MergeState",
    "RemoteRepository",
    "MergeSettings",
    "load_settings",
    "__version__",
]
