"""checkurl: report whether a GitHub pull request is blocked on a user.

Exit codes:
  0  nobody has an action assigned
  1  at least one user has an action assigned, or any error occurred
"""

import json
import logging
from datetime import datetime, timezone
from typing import NoReturn

import click

from turnclient import __version__
from turnclient.auth import resolve_github_token
from turnclient.client import TurnClient
from turnclient.exceptions import (
    ConfigurationError,
    RequestInterruptedError,
    RequestTimeoutError,
    TurnError,
)
from turnclient.logging import configure_logging

DEFAULT_BACKEND = "http://localhost:8080"
REQUEST_TIMEOUT = 30.0
USER_AUTH_TIMEOUT = 10.0

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_ERROR = 1


def _fail(ctx: click.Context, message: str) -> NoReturn:
    click.echo(message, err=True)
    ctx.exit(EXIT_ERROR)


@click.command("checkurl")
@click.version_option(version=__version__, prog_name="checkurl")
@click.argument("pr_url")
@click.option(
    "--backend",
    envvar="TURN_BACKEND",
    default=DEFAULT_BACKEND,
    show_default=True,
    help="Backend server URL.",
)
@click.option(
    "--user",
    "username",
    default=None,
    help="GitHub username to check (defaults to the authenticated user).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log diagnostics to stderr.")
@click.option("--no-cache", is_flag=True, help="Ask the backend to skip cached results.")
@click.option("--include-events", is_flag=True, help="Include the full event list in the output.")
@click.option(
    "--timeout",
    type=float,
    default=REQUEST_TIMEOUT,
    show_default=True,
    help="Overall deadline for the check in seconds, retries included.",
)
@click.pass_context
def main(
    ctx: click.Context,
    pr_url: str,
    backend: str,
    username: str | None,
    verbose: bool,
    no_cache: bool,
    include_events: bool,
    timeout: float,
) -> None:
    """Check whether PR_URL is blocked on a user and print the analysis as JSON."""
    if verbose:
        configure_logging(level=logging.DEBUG)

    token = resolve_github_token()
    if not token:
        if not username:
            _fail(
                ctx,
                "Error: No GitHub token found and no username specified.\n"
                "To authenticate, run 'gh auth login' or set GITHUB_TOKEN environment variable.\n"
                "Alternatively, specify --user=<username> to check a specific user.",
            )
        click.echo("Warning: No GitHub token found. API requests may be rate limited.", err=True)

    try:
        client = TurnClient(
            backend,
            auth_token=token,
            no_cache=no_cache,
            include_events=include_events,
        )
    except ConfigurationError as e:
        _fail(ctx, f"Error creating client: {e.message}")

    with client:
        if not username:
            try:
                username = client.current_user(timeout=USER_AUTH_TIMEOUT)
            except TurnError as e:
                _fail(ctx, f"Error getting current GitHub user: {e.message}")
            click.echo(f"Using authenticated user: {username}", err=True)

        try:
            result = client.check(pr_url, username, datetime.now(timezone.utc), timeout=timeout)
        except RequestTimeoutError as e:
            _fail(ctx, f"Error checking PR: timed out after {timeout:g}s: {e.message}")
        except RequestInterruptedError as e:
            _fail(ctx, f"Error checking PR: interrupted: {e.message}")
        except TurnError as e:
            _fail(ctx, f"Error checking PR: {e.message}")
        except KeyboardInterrupt:
            _fail(ctx, "Error checking PR: interrupted")

    click.echo(json.dumps(result.to_dict(), indent=2))
    ctx.exit(EXIT_BLOCKED if result.blocked else EXIT_OK)
