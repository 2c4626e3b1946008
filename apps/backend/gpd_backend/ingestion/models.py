"""Pydantic schemas for GitHub REST payloads and the merged dashboard dataset."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from gpd_backend.core.errors import GitHubPayloadError

UNKNOWN_AUTHOR = "unknown"

RemoteModel = TypeVar("RemoteModel", bound=BaseModel)


# Remote payloads (validated at the API boundary)

class RemoteOwner(BaseModel):
    login: str


class RemoteUser(BaseModel):
    login: str


class RemoteRepository(BaseModel):
    """One item of GET /user/repos"""
    name: str
    full_name: str
    html_url: str
    owner: RemoteOwner
    private: bool
    visibility: str | None = None
    archived: bool
    has_issues: bool
    open_issues_count: int
    updated_at: str
    default_branch: str

    @property
    def organization(self) -> str:
        return self.owner.login

    @property
    def resolved_visibility(self) -> str:
        if self.visibility:
            return self.visibility
        return "private" if self.private else "public"


class RemotePullRequest(BaseModel):
    """One item of GET /repos/{owner}/{repo}/pulls"""
    number: int
    title: str
    html_url: str
    draft: bool = False
    created_at: str
    user: RemoteUser | None = None

    @property
    def author(self) -> str:
        return self.user.login if self.user else UNKNOWN_AUTHOR


def parse_items(model: type[RemoteModel], items: list[Any], path: str) -> list[RemoteModel]:
    """Validates every item or raises GitHubPayloadError naming the first bad field"""
    parsed: list[RemoteModel] = []
    for index, item in enumerate(items):
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "<root>"
            raise GitHubPayloadError(
                path,
                f"item {index} {model.__name__}.{location}: {first['msg']}",
            ) from e
    return parsed


# Dashboard output (camelCase on the wire)

class _DashboardModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardRepository(_DashboardModel):
    id: str
    organization: str
    name: str
    full_name: str
    url: str
    private: bool
    visibility: str
    archived: bool
    open_issues_count: int
    open_pull_request_count: int
    updated_at: str
    default_branch: str
    accounts: list[str]


class DashboardPullRequest(_DashboardModel):
    """First sighting wins; never mutated once recorded"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    organization: str
    repository: str
    repository_full_name: str
    number: int
    title: str
    url: str
    author: str
    draft: bool
    created_at: str
    account: str


class PullRequestDashboardData(_DashboardModel):
    config_path: str
    warnings: list[str]
    pull_requests: list[DashboardPullRequest]
    repositories: list[DashboardRepository]
