"""Repository discovery for one credential"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .models import RemoteRepository, parse_items

if TYPE_CHECKING:
    from .github_client import GitHubRestClient

logger = logging.getLogger(__name__)

ACCESSIBLE_REPOS_PATH = (
    "/user/repos?visibility=all"
    "&affiliation=owner,collaborator,organization_member"
    "&sort=updated&direction=desc"
)


def _owner_login(item: Any) -> str | None:
    owner = item.get("owner") if isinstance(item, dict) else None
    login = owner.get("login") if isinstance(owner, dict) else None
    return login if isinstance(login, str) else None


class RepositoryDiscovery:
    """
    Lists every repository the client's token can see, most recently updated first,
    and keeps those owned by one of the allowed organizations (case-insensitive).
    """

    def __init__(self, client: GitHubRestClient):
        self._client = client

    async def discover(self, allowed_organizations: Iterable[str]) -> list[RemoteRepository]:
        allowed = {org.lower() for org in allowed_organizations}

        raw_items = await self._client.paginate(ACCESSIBLE_REPOS_PATH)

        # Only repos in configured orgs are validated; an item without an owner login
        # cannot be placed and goes on to fail validation
        in_orgs = [
            item for item in raw_items
            if (login := _owner_login(item)) is None or login.lower() in allowed
        ]
        # Credentials with no access to any configured org yield an empty list
        filtered = parse_items(RemoteRepository, in_orgs, ACCESSIBLE_REPOS_PATH)

        logger.info(
            f"Discovery: {len(filtered)}/{len(raw_items)} accessible repos in configured orgs",
            extra={
                "repos_accessible": len(raw_items),
                "repos_in_orgs": len(filtered),
            },
        )
        return filtered
