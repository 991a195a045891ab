"""Tests for the orchestrator pipeline."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from pr_checker.config import Settings
from pr_checker.errors import AccessDeniedError, FetchError
from pr_checker.github.client import GitHubClient
from pr_checker.orchestrator import ensure_org_access, run

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _iso(days_ago: int) -> str:
    return (NOW - timedelta(days=days_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


def _pull(number: int, title: str, login: str, days_ago: int, draft: bool = False):
    return {
        "title": title,
        "user": {"login": login},
        "html_url": f"https://github.com/acme/repo/pull/{number}",
        "draft": draft,
        "updated_at": _iso(days_ago),
    }


@pytest.fixture
def mock_client():
    client = AsyncMock(spec=GitHubClient)
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    client.org_logins.return_value = {"acme"}
    client.list_repos.return_value = [{"name": "repo-a"}, {"name": "repo-b"}]

    async def list_pulls(owner, repo):
        if repo == "repo-a":
            return [_pull(1, "Fix bug", "alice", 3)]
        return [_pull(2, "Old draft", "bob", 30, draft=True)]

    client.list_pull_requests.side_effect = list_pulls
    return client


def _settings(**kwargs) -> Settings:
    defaults = dict(token="tok", org="acme", plain=True)
    defaults.update(kwargs)
    return Settings(**defaults)


@pytest.mark.asyncio
async def test_ensure_org_access_ok(mock_client):
    await ensure_org_access(mock_client, "acme")


@pytest.mark.asyncio
async def test_ensure_org_access_denied(mock_client):
    mock_client.org_logins.return_value = {"globex"}
    with pytest.raises(AccessDeniedError) as excinfo:
        await ensure_org_access(mock_client, "acme")
    assert excinfo.value.org == "acme"


@pytest.mark.asyncio
async def test_run_end_to_end(mock_client, capsys):
    with patch("pr_checker.orchestrator.GitHubClient", return_value=mock_client):
        report = await run(_settings(), now=NOW, progress=False)

    assert report.total_repos == 2
    out = capsys.readouterr().out
    assert out == (
        "repo-a\n"
        "  Ready\t- alice => Fix bug (https://github.com/acme/repo/pull/1)\n"
    )


@pytest.mark.asyncio
async def test_run_no_access_makes_no_repo_calls(mock_client, capsys):
    mock_client.org_logins.return_value = {"globex"}
    with patch("pr_checker.orchestrator.GitHubClient", return_value=mock_client):
        with pytest.raises(AccessDeniedError):
            await run(_settings(), now=NOW, progress=False)

    mock_client.list_repos.assert_not_awaited()
    mock_client.list_pull_requests.assert_not_awaited()
    assert capsys.readouterr().out == ""


@pytest.mark.asyncio
async def test_run_fail_fast_prints_nothing(mock_client, capsys):
    async def list_pulls(owner, repo):
        if repo == "repo-b":
            return [{"title": "missing fields"}]
        return [_pull(1, "Fix bug", "alice", 3)]

    mock_client.list_pull_requests.side_effect = list_pulls
    with patch("pr_checker.orchestrator.GitHubClient", return_value=mock_client):
        with pytest.raises(FetchError) as excinfo:
            await run(_settings(), now=NOW, progress=False)

    assert [f.name for f in excinfo.value.failures] == ["repo-b"]
    assert capsys.readouterr().out == ""


@pytest.mark.asyncio
async def test_run_allow_partial(mock_client, capsys):
    async def list_pulls(owner, repo):
        if repo == "repo-b":
            return [{"title": "missing fields"}]
        return [_pull(1, "Fix bug", "alice", 3)]

    mock_client.list_pull_requests.side_effect = list_pulls
    with patch("pr_checker.orchestrator.GitHubClient", return_value=mock_client):
        report = await run(_settings(allow_partial=True), now=NOW, progress=False)

    assert len(report.failures) == 1
    captured = capsys.readouterr()
    assert "alice => Fix bug" in captured.out
    assert "repo-b" in captured.err


@pytest.mark.asyncio
async def test_run_passes_settings_to_client(mock_client):
    with patch(
        "pr_checker.orchestrator.GitHubClient", return_value=mock_client
    ) as factory:
        await run(
            _settings(concurrency=2, api_url="https://ghe/api/v3", verify_ssl=False),
            now=NOW,
            progress=False,
        )
    factory.assert_called_once_with(
        token="tok", concurrency=2, base_url="https://ghe/api/v3", verify_ssl=False
    )


@pytest.mark.asyncio
async def test_run_days_window(mock_client, capsys):
    with patch("pr_checker.orchestrator.GitHubClient", return_value=mock_client):
        await run(_settings(days=2), now=NOW, progress=False)
    assert capsys.readouterr().out == ""
