"""GitHub REST API client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"
PER_PAGE = 100


class GitHubClient:
    """Async GitHub REST API client.

    Each listing is a single request; pagination, rate limiting and retries
    are not handled.
    """

    def __init__(
        self,
        token: str,
        concurrency: int = 8,
        base_url: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers=headers,
            timeout=30.0,
            verify=verify_ssl,
        )
        self._semaphore = asyncio.Semaphore(concurrency)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        async with self._semaphore:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response

    async def _get_list(
        self, url: str, params: dict[str, Any] | None = None
    ) -> list[Any]:
        params = dict(params or {})
        params.setdefault("per_page", PER_PAGE)
        response = await self._get(url, params)
        data = response.json()
        if not isinstance(data, list):
            logger.warning("%s: expected a list, got %s", url, type(data).__name__)
            return []
        if len(data) >= PER_PAGE:
            logger.debug("%s: result may be truncated at %d items", url, PER_PAGE)
        return data

    async def list_org_memberships(self) -> list[dict[str, Any]]:
        """List organization memberships of the authenticated user."""
        return await self._get_list("/user/memberships/orgs")

    async def org_logins(self) -> set[str]:
        """Return the logins of every organization the token can see."""
        logins: set[str] = set()
        for membership in await self.list_org_memberships():
            org = membership.get("organization") or {}
            login = org.get("login")
            if login:
                logins.add(login)
        return logins

    async def list_repos(self, org: str) -> list[dict[str, Any]]:
        """List repositories of an organization."""
        return await self._get_list(f"/orgs/{org}/repos", params={"type": "all"})

    async def list_pull_requests(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List open pull requests (drafts included) for a repository."""
        return await self._get_list(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": "open", "sort": "updated", "direction": "desc"},
        )
