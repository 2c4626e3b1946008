"""Unit tests for merging per-account results into run-scoped collections"""

import pytest
from pydantic import ValidationError

from gpd_backend.ingestion.merger import (
    AggregationRun,
    build_pull_requests,
    merge_pull_requests,
    merge_repositories,
    pull_request_key,
    record_pull_request_count,
)
from gpd_backend.ingestion.models import RemotePullRequest, RemoteRepository


def make_repo(full_name: str, **overrides) -> RemoteRepository:
    owner, name = full_name.split("/", 1)
    fields = {
        "name": name,
        "full_name": full_name,
        "html_url": f"https://github.com/{full_name}",
        "owner": {"login": owner},
        "private": False,
        "visibility": "public",
        "archived": False,
        "has_issues": True,
        "open_issues_count": 2,
        "updated_at": "2024-01-01T00:00:00Z",
        "default_branch": "main",
    }
    fields.update(overrides)
    return RemoteRepository.model_validate(fields)


def make_pull(number: int, title: str = "Fix bug", login: str | None = "alice") -> RemotePullRequest:
    return RemotePullRequest.model_validate(
        {
            "number": number,
            "title": title,
            "html_url": f"https://github.com/acme/widgets/pull/{number}",
            "draft": False,
            "created_at": "2024-01-01T00:00:00Z",
            "user": {"login": login} if login else None,
        }
    )


class TestMergeRepositories:

    def test_inserts_new_repository_with_zero_pr_count(self):
        run = AggregationRun()

        added = merge_repositories(run.repositories, "A", [make_repo("acme/widgets")])

        assert added == 1
        merged = run.repositories["acme/widgets"]
        assert merged.accounts == {"A"}
        assert merged.open_pull_request_count == 0
        assert merged.organization == "acme"
        assert merged.url == "https://github.com/acme/widgets"

    def test_repeat_sighting_only_adds_account(self):
        run = AggregationRun()
        merge_repositories(run.repositories, "A", [make_repo("acme/widgets", open_issues_count=2)])

        added = merge_repositories(
            run.repositories,
            "B",
            [make_repo("acme/widgets", open_issues_count=9, default_branch="develop")],
        )

        assert added == 0
        merged = run.repositories["acme/widgets"]
        assert merged.accounts == {"A", "B"}
        assert merged.open_issues_count == 2
        assert merged.default_branch == "main"

    def test_keys_are_union_of_all_accounts(self):
        run = AggregationRun()
        merge_repositories(run.repositories, "A", [make_repo("acme/a"), make_repo("acme/shared")])
        merge_repositories(run.repositories, "B", [make_repo("acme/shared"), make_repo("acme/b")])
        merge_repositories(run.repositories, "C", [make_repo("acme/shared")])

        assert list(run.repositories) == ["acme/a", "acme/shared", "acme/b"]

    def test_accounts_materialize_sorted_and_deduplicated(self):
        run = AggregationRun()
        merge_repositories(run.repositories, "zeta", [make_repo("acme/shared")])
        merge_repositories(run.repositories, "alpha", [make_repo("acme/shared")])
        merge_repositories(run.repositories, "zeta", [make_repo("acme/shared")])

        [repository] = run.repository_list()

        assert repository.accounts == ["alpha", "zeta"]

    def test_accounts_sort_ignores_case(self):
        run = AggregationRun()
        merge_repositories(run.repositories, "alice", [make_repo("acme/shared")])
        merge_repositories(run.repositories, "Bob", [make_repo("acme/shared")])
        merge_repositories(run.repositories, "Carol", [make_repo("acme/shared")])

        [repository] = run.repository_list()

        assert repository.accounts == ["alice", "Bob", "Carol"]


class TestRecordPullRequestCount:

    def test_keeps_maximum_observation(self):
        run = AggregationRun()
        merge_repositories(run.repositories, "A", [make_repo("acme/widgets")])

        record_pull_request_count(run.repositories, "acme/widgets", 3)
        record_pull_request_count(run.repositories, "acme/widgets", 1)

        assert run.repositories["acme/widgets"].open_pull_request_count == 3

    def test_higher_later_observation_wins(self):
        run = AggregationRun()
        merge_repositories(run.repositories, "A", [make_repo("acme/widgets")])

        record_pull_request_count(run.repositories, "acme/widgets", 1)
        record_pull_request_count(run.repositories, "acme/widgets", 4)

        assert run.repositories["acme/widgets"].open_pull_request_count == 4

    def test_unknown_repository_is_ignored(self):
        run = AggregationRun()

        record_pull_request_count(run.repositories, "acme/ghost", 5)

        assert run.repositories == {}


class TestPullRequests:

    def test_build_uses_repo_identity_and_account(self):
        repo = make_repo("acme/widgets")

        [pr] = build_pull_requests(repo, [make_pull(7)], "A")

        assert pr.id == "acme/widgets#7" == pull_request_key("acme/widgets", 7)
        assert pr.organization == "acme"
        assert pr.repository == "widgets"
        assert pr.repository_full_name == "acme/widgets"
        assert pr.author == "alice"
        assert pr.account == "A"

    def test_missing_author_uses_sentinel(self):
        [pr] = build_pull_requests(make_repo("acme/widgets"), [make_pull(1, login=None)], "A")

        assert pr.author == "unknown"

    def test_first_seen_wins(self):
        run = AggregationRun()
        repo = make_repo("acme/widgets")
        first = build_pull_requests(repo, [make_pull(5, title="Original")], "A")
        second = build_pull_requests(repo, [make_pull(5, title="Renamed"), make_pull(6)], "B")

        assert merge_pull_requests(run.pull_requests, first) == 1
        assert merge_pull_requests(run.pull_requests, second) == 1

        assert len(run.pull_requests) == 2
        kept = run.pull_requests["acme/widgets#5"]
        assert kept.title == "Original"
        assert kept.account == "A"
        assert run.pull_requests["acme/widgets#6"].account == "B"

    def test_recorded_pull_requests_are_immutable(self):
        [pr] = build_pull_requests(make_repo("acme/widgets"), [make_pull(1)], "A")

        with pytest.raises(ValidationError):
            pr.title = "changed"

    def test_pull_request_list_keeps_insertion_order(self):
        run = AggregationRun()
        repo = make_repo("acme/widgets")
        merge_pull_requests(run.pull_requests, build_pull_requests(repo, [make_pull(9), make_pull(2)], "A"))
        merge_pull_requests(run.pull_requests, build_pull_requests(repo, [make_pull(5)], "B"))

        assert [pr.number for pr in run.pull_request_list()] == [9, 2, 5]

    def test_serializes_with_camel_case_keys(self):
        [pr] = build_pull_requests(make_repo("acme/widgets"), [make_pull(7)], "A")

        data = pr.model_dump(by_alias=True)

        assert data["repositoryFullName"] == "acme/widgets"
        assert data["createdAt"] == "2024-01-01T00:00:00Z"
