"""GitHub token discovery.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable
  2. GH_TOKEN environment variable (used by the GitHub CLI)
  3. `gh auth token`
"""

import os
import subprocess

from turnclient.logging import get_logger

logger = get_logger("auth")

GH_TIMEOUT = 10.0


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no source has one. Never raises."""
    for name in ("GITHUB_TOKEN", "GH_TOKEN"):
        token = os.environ.get(name, "").strip()
        if token:
            logger.debug("using token from %s", name)
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=GH_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("gh auth token unavailable: %s", e)
        return None

    if result.returncode != 0:
        logger.debug("gh auth token exited with status %d", result.returncode)
        return None

    return result.stdout.strip() or None
