"""API route serving the merged pull request dashboard dataset."""
from fastapi import APIRouter

from gpd_backend.ingestion.models import PullRequestDashboardData
from gpd_backend.services.dashboard_service import fetch_dashboard_pull_requests

router = APIRouter()


@router.get("", response_model=PullRequestDashboardData)
async def get_dashboard() -> PullRequestDashboardData:
    """
    Aggregates open pull requests and repositories across every configured account.

    Each request re-reads the config and re-fetches from GitHub; nothing is cached.
    Config and GitHub failures are rendered by the DashboardError handler.
    """
    return await fetch_dashboard_pull_requests()
