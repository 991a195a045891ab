"""CLI entrypoint for pr-checker."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
import httpx
from click.core import ParameterSource

from . import __version__
from .config import MAX_DAYS, config_path, load_config_file, resolve_settings
from .errors import (
    AccessDeniedError,
    ConfigError,
    FetchError,
    MalformedPullRequestError,
)

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def _given(ctx: click.Context, name: str, value):
    """Return ``value`` only if the option was passed or came from its env var."""
    source = ctx.get_parameter_source(name)
    if source in (None, ParameterSource.DEFAULT, ParameterSource.DEFAULT_MAP):
        return None
    return value


@click.command()
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    default=None,
    show_envvar=True,
    help="GitHub access token",
)
@click.option(
    "--org-name",
    "org",
    envvar="GITHUB_ORG",
    default=None,
    show_envvar=True,
    help="Organization name",
)
@click.option(
    "--plain/--styled",
    "plain",
    default=None,
    help="Plain tab-separated output or colored, hyperlinked output [default: styled]",
)
@click.option(
    "--be-ugly",
    "be_ugly",
    is_flag=True,
    default=False,
    hidden=True,
    help="Alias for --plain",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of repositories fetched at once [default: 8]",
)
@click.option(
    "--days",
    type=click.IntRange(min=1, max=MAX_DAYS),
    default=None,
    help="Only show pull requests updated within this many days [default: 14]",
)
@click.option(
    "--drafts-first/--ready-first",
    "drafts_first",
    default=None,
    help="Order drafts before ready pull requests with the same timestamp",
)
@click.option(
    "--allow-partial/--fail-fast",
    "allow_partial",
    default=None,
    help="Show results even if some repositories fail to load [default: fail-fast]",
)
@click.option(
    "--exclude-repo",
    multiple=True,
    help="Exclude repo by name (repeatable)",
)
@click.option(
    "--api-url",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option(
    "--config",
    "config_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file path [default: ~/.pr-checker/config.json]",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context,
    token: str | None,
    org: str | None,
    plain: bool | None,
    be_ugly: bool,
    concurrency: int | None,
    days: int | None,
    drafts_first: bool | None,
    allow_partial: bool | None,
    exclude_repo: tuple[str, ...],
    api_url: str | None,
    no_ssl_verify: bool,
    config_file: Path | None,
    verbose: bool,
) -> None:
    """List fresh open and draft pull requests across a GitHub organization.

    \b
    Options not given on the command line are read from
    ~/.pr-checker/config.json when it exists.

    \b
    Examples:
      pr-checker --org-name acme
      pr-checker --org-name acme --plain --days 7
      pr-checker --org-name acme --allow-partial --exclude-repo legacy
    """
    _setup_logging(verbose)

    plain = _given(ctx, "plain", plain)
    if be_ugly and plain is None:
        plain = True

    try:
        path = config_file or config_path()
        file_values = load_config_file(path)
        settings = resolve_settings(
            {
                "token": token,
                "org": org,
                "plain": plain,
                "concurrency": concurrency,
                "days": days,
                "drafts_first": _given(ctx, "drafts_first", drafts_first),
                "allow_partial": _given(ctx, "allow_partial", allow_partial),
                "api_url": api_url,
                "verify_ssl": False if no_ssl_verify else None,
                "exclude_repos": exclude_repo,
            },
            file_values,
        )
    except ConfigError as exc:
        click.echo(f"Issue with config. Error: {exc}", err=True)
        sys.exit(1)

    if settings.missing():
        click.echo(
            f"Missing {' and '.join(settings.missing())}: pass them as command line "
            f"args or set them in a config file at `{path}`"
        )
        click.echo("Run: pr-checker --help")
        sys.exit(0)

    logger.debug("Checking %s with %s", settings.org, path)

    from .orchestrator import run

    try:
        asyncio.run(run(settings))
    except AccessDeniedError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    except FetchError as exc:
        click.echo(f"Error: {exc}", err=True)
        for failure in exc.failures:
            click.echo(f"  {failure.name}: {failure.error}", err=True)
        click.echo("Use --allow-partial to show the repositories that loaded.", err=True)
        sys.exit(1)
    except MalformedPullRequestError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status == 404:
            click.echo(f"Error: '{settings.org}' not found. Check the org name.", err=True)
        elif status in (401, 403):
            click.echo("Error: Authentication failed. Check your --token or $GITHUB_TOKEN.", err=True)
        else:
            click.echo(f"Error: GitHub API returned {status}.", err=True)
        sys.exit(1)
    except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
        click.echo(f"Error: Could not connect to GitHub API. {exc}", err=True)
        sys.exit(1)
    except httpx.HTTPError as exc:
        click.echo(f"Error: GitHub API request failed. {type(exc).__name__}: {exc}", err=True)
        sys.exit(1)
    except Exception as exc:
        logger.debug("Unexpected error", exc_info=True)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
