"""
Dashboard aggregation: walks every configured account, discovers its repositories,
fetches open pull requests for the candidates, and merges everything into one
deduplicated dataset.

Accounts are processed one after another; only the per-repository pull request
listing inside an account fans out. Any GitHub failure aborts the whole run and no
partial dataset is returned.
"""
import logging
import time
from collections.abc import Callable

from gpd_backend.core.config import Settings, get_settings
from gpd_backend.ingestion.discovery import RepositoryDiscovery
from gpd_backend.ingestion.github_client import GitHubRestClient
from gpd_backend.ingestion.merger import (
    AggregationRun,
    build_pull_requests,
    merge_pull_requests,
    merge_repositories,
    record_pull_request_count,
)
from gpd_backend.ingestion.models import PullRequestDashboardData, RemoteRepository
from gpd_backend.ingestion.pull_request_fetcher import PullRequestFetcher
from gpd_backend.services.dashboard_config import (
    Account,
    DashboardConfigLoadResult,
    load_dashboard_config,
)

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], DashboardConfigLoadResult]
ClientFactory = Callable[[str], GitHubRestClient]


def is_pull_request_candidate(repo: RemoteRepository) -> bool:
    """
    open_issues_count includes pull requests, so zero means nothing to list.
    Repos with the issues feature disabled are skipped as well, even though GitHub
    does not guarantee they have no open pull requests.
    """
    return not repo.archived and repo.has_issues and repo.open_issues_count > 0


class DashboardAggregator:
    """Entry point for one aggregation; every run() starts from empty state"""

    def __init__(
        self,
        settings: Settings | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self._settings = settings or get_settings()
        self._client_factory = client_factory or self._default_client

    def _default_client(self, token: str) -> GitHubRestClient:
        return GitHubRestClient(
            token,
            base_url=self._settings.github_api_base_url,
            api_version=self._settings.github_api_version,
            page_size=self._settings.github_page_size,
        )

    async def run(self, config_loader: ConfigLoader = load_dashboard_config) -> PullRequestDashboardData:
        config = config_loader()
        run = AggregationRun()
        start_time = time.monotonic()

        for account in config.accounts:
            await self._process_account(run, account)

        elapsed = time.monotonic() - start_time
        logger.info(
            f"Aggregation complete in {elapsed:.1f}s: {len(run.repositories)} repos, "
            f"{len(run.pull_requests)} open PRs across {len(config.accounts)} account(s)",
            extra={
                "accounts": len(config.accounts),
                "repositories": len(run.repositories),
                "pull_requests": len(run.pull_requests),
                "duration_s": round(elapsed, 1),
            },
        )

        return PullRequestDashboardData(
            config_path=config.config_path,
            warnings=list(config.warnings),
            pull_requests=run.pull_request_list(),
            repositories=run.repository_list(),
        )

    async def _process_account(self, run: AggregationRun, account: Account) -> None:
        async with self._client_factory(account.token) as client:
            discovered = await RepositoryDiscovery(client).discover(account.organizations)
            new_repos = merge_repositories(run.repositories, account.name, discovered)

            candidates = [repo for repo in discovered if is_pull_request_candidate(repo)]
            fetcher = PullRequestFetcher(client, concurrency=self._settings.repo_fetch_concurrency)
            batches = await fetcher.fetch_all(candidates)

        new_pull_requests = 0
        for repo, pull_requests in zip(candidates, batches):
            record_pull_request_count(run.repositories, repo.full_name, len(pull_requests))
            new_pull_requests += merge_pull_requests(
                run.pull_requests,
                build_pull_requests(repo, pull_requests, account.name),
            )

        logger.info(
            f"Account {account.name}: {len(discovered)} repos ({new_repos} new), "
            f"{len(candidates)} candidates, {new_pull_requests} new open PRs",
            extra={
                "account": account.name,
                "repos_discovered": len(discovered),
                "repos_new": new_repos,
                "candidates": len(candidates),
                "pull_requests_new": new_pull_requests,
            },
        )


async def fetch_dashboard_pull_requests(
    config_loader: ConfigLoader = load_dashboard_config,
) -> PullRequestDashboardData:
    """Runs a fresh aggregation with default settings"""
    return await DashboardAggregator().run(config_loader)
