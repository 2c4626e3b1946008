"""Bounded-concurrency fan-out of open pull request listings"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, TypeVar
from urllib.parse import quote

from .models import RemotePullRequest, RemoteRepository, parse_items

if TYPE_CHECKING:
    from .github_client import GitHubRestClient

logger = logging.getLogger(__name__)

OPEN_PULLS_PATH = "/repos/{owner}/{repo}/pulls?state=open&sort=created&direction=desc"

DEFAULT_CONCURRENCY: int = 8

T = TypeVar("T")
R = TypeVar("R")


async def map_with_concurrency(
    items: Sequence[T],
    limit: int,
    mapper: Callable[[T], Awaitable[R]],
) -> list[R]:
    """Runs mapper over items with at most `limit` calls in flight.

    min(limit, len(items)) workers share one cursor; each claims the next index and
    stores its result at that index, so output order matches input order whatever
    the completion order. Claiming happens between awaits on the event loop, so the
    cursor and the results list need no lock.

    The first mapper failure propagates out of this call. Sibling workers are not
    cancelled and keep draining the cursor in the background.
    """
    if limit < 1:
        raise ValueError("concurrency limit must be at least 1")

    results: list[R | None] = [None] * len(items)
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(items):
            index = cursor
            cursor += 1
            results[index] = await mapper(items[index])

    await asyncio.gather(*(worker() for _ in range(min(limit, len(items)))))
    return results  # type: ignore[return-value]


class PullRequestFetcher:
    """Fetches every open pull request of each candidate repository"""

    def __init__(self, client: GitHubRestClient, concurrency: int = DEFAULT_CONCURRENCY):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._client = client
        self._concurrency = concurrency

    async def fetch_all(self, repositories: Sequence[RemoteRepository]) -> list[list[RemotePullRequest]]:
        """Returns one pull request list per repository, index-aligned with the input"""
        if not repositories:
            return []

        start_time = time.monotonic()
        batches = await map_with_concurrency(repositories, self._concurrency, self.fetch_repository)

        elapsed = time.monotonic() - start_time
        logger.info(
            f"Fetched open PRs for {len(repositories)} repos in {elapsed:.1f}s "
            f"with concurrency={self._concurrency}",
            extra={
                "repos": len(repositories),
                "pull_requests": sum(len(batch) for batch in batches),
                "concurrency": self._concurrency,
                "duration_s": round(elapsed, 1),
            },
        )
        return batches

    async def fetch_repository(self, repository: RemoteRepository) -> list[RemotePullRequest]:
        path = OPEN_PULLS_PATH.format(
            owner=quote(repository.organization, safe=""),
            repo=quote(repository.name, safe=""),
        )
        raw_items = await self._client.paginate(path)
        return parse_items(RemotePullRequest, raw_items, path)
