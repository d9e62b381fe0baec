"""GitHub token resolution.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable
  2. GH_TOKEN environment variable
  3. ``gh auth token`` (GitHub CLI session)
"""

import os
import subprocess

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None if no source provides one.

    Returns
    -------
    str or None
        The first token found.

    """
    for var in TOKEN_ENV_VARS:
        token = os.environ.get(var)
        if token:
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip() or None
