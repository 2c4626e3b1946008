"""
Folds per-account discovery and pull request results into run-scoped, deduplicated
collections.

Repositories are keyed by full name ("org/repo") and accumulate the accounts that
can see them. Pull requests are keyed by "org/repo#number" and the first sighting
wins. Dict insertion order is the order accounts and repositories were processed;
nothing here sorts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import (
    DashboardPullRequest,
    DashboardRepository,
    RemotePullRequest,
    RemoteRepository,
)

logger = logging.getLogger(__name__)


def pull_request_key(repository_full_name: str, number: int) -> str:
    return f"{repository_full_name}#{number}"


@dataclass
class MergedRepository:
    id: str
    organization: str
    name: str
    full_name: str
    url: str
    private: bool
    visibility: str
    archived: bool
    open_issues_count: int
    updated_at: str
    default_branch: str
    accounts: set[str]
    open_pull_request_count: int = 0

    @classmethod
    def from_remote(cls, repo: RemoteRepository, account_name: str) -> MergedRepository:
        return cls(
            id=repo.full_name,
            organization=repo.organization,
            name=repo.name,
            full_name=repo.full_name,
            url=repo.html_url,
            private=repo.private,
            visibility=repo.resolved_visibility,
            archived=repo.archived,
            open_issues_count=repo.open_issues_count,
            updated_at=repo.updated_at,
            default_branch=repo.default_branch,
            accounts={account_name},
        )

    def to_dashboard(self) -> DashboardRepository:
        return DashboardRepository(
            id=self.id,
            organization=self.organization,
            name=self.name,
            full_name=self.full_name,
            url=self.url,
            private=self.private,
            visibility=self.visibility,
            archived=self.archived,
            open_issues_count=self.open_issues_count,
            open_pull_request_count=self.open_pull_request_count,
            updated_at=self.updated_at,
            default_branch=self.default_branch,
            accounts=sorted(self.accounts, key=lambda name: (name.casefold(), name)),
        )


def merge_repositories(
    repositories: dict[str, MergedRepository],
    account_name: str,
    discovered: Iterable[RemoteRepository],
) -> int:
    """Adds account_name to known repos, inserts unseen ones; returns how many were new.

    Fields of an existing entry are left as first seen; only accounts grows.
    """
    added = 0
    for repo in discovered:
        existing = repositories.get(repo.full_name)
        if existing is not None:
            existing.accounts.add(account_name)
            continue

        repositories[repo.full_name] = MergedRepository.from_remote(repo, account_name)
        added += 1
    return added


def record_pull_request_count(
    repositories: dict[str, MergedRepository],
    repository_key: str,
    observed_count: int,
) -> None:
    """Keeps the largest open PR count any account has observed for the repo"""
    repository = repositories.get(repository_key)
    if repository is None:
        logger.warning(f"PR count observed for unknown repository {repository_key}")
        return
    repository.open_pull_request_count = max(repository.open_pull_request_count, observed_count)


def build_pull_requests(
    repository: RemoteRepository,
    pull_requests: Iterable[RemotePullRequest],
    account_name: str,
) -> list[DashboardPullRequest]:
    return [
        DashboardPullRequest(
            id=pull_request_key(repository.full_name, pr.number),
            organization=repository.organization,
            repository=repository.name,
            repository_full_name=repository.full_name,
            number=pr.number,
            title=pr.title,
            url=pr.html_url,
            author=pr.author,
            draft=pr.draft,
            created_at=pr.created_at,
            account=account_name,
        )
        for pr in pull_requests
    ]


def merge_pull_requests(
    pull_requests: dict[str, DashboardPullRequest],
    candidates: Iterable[DashboardPullRequest],
) -> int:
    """Inserts candidates whose id is absent; existing entries are never replaced"""
    inserted = 0
    for candidate in candidates:
        if candidate.id in pull_requests:
            continue
        pull_requests[candidate.id] = candidate
        inserted += 1
    return inserted


@dataclass
class AggregationRun:
    """State owned by exactly one aggregation; never shared between runs"""

    repositories: dict[str, MergedRepository] = field(default_factory=dict)
    pull_requests: dict[str, DashboardPullRequest] = field(default_factory=dict)

    def repository_list(self) -> list[DashboardRepository]:
        return [repo.to_dashboard() for repo in self.repositories.values()]

    def pull_request_list(self) -> list[DashboardPullRequest]:
        return list(self.pull_requests.values())
