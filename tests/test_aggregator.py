"""Tests for server-wide changeset aggregation."""

from __future__ import annotations

import pytest

from conftest import FakeRunner, fail, ok, posix_only, read_calls
from plasticview.cm.errors import CmLaunchError, CmSubcommandError, NoRepositoriesFoundError
from plasticview.cm.executable import DefaultExecutable, ExplicitExecutable
from plasticview.config import CHANGESET_FORMAT
from plasticview.history.aggregator import (
    changeset_date_key,
    collect_repository_outcomes,
    list_all_changesets,
    sort_newest_first,
)
from plasticview.models import ChangesetRecord

EXE = DefaultExecutable()
SERVER = "acme@cloud"


def _repos_call(server: str = SERVER) -> tuple[str, ...]:
    return ("find", "repos", "on", "repserver", server)


def _changesets_call(repo: str, server: str = SERVER) -> tuple[str, ...]:
    return (
        "find", "changesets", "on", "repository", f"{repo}@{server}",
        f"--format={CHANGESET_FORMAT}", "--nototal", "-n", "20",
    )


def _rows(*rows: tuple[int, str]) -> str:
    return "".join(f"{cid}|user{cid}|{date}|comment {cid}|/main\n" for cid, date in rows)


def _record(cid: int, date: str, repo: str) -> ChangesetRecord:
    return ChangesetRecord(
        id=cid, author=f"user{cid}", date=date,
        comment=f"comment {cid}", branch="/main", repository=repo,
    )


@pytest.fixture
def two_repo_runner() -> FakeRunner:
    return FakeRunner({
        _repos_call(): ok("Repository\nName\ngame\n\nengine\n"),
        _changesets_call("game"): ok(_rows(
            (1, "2024-01-01 09:00:00"),
            (2, "2024-01-03 09:00:00"),
            (3, "2024-01-05 09:00:00"),
        )),
        _changesets_call("engine"): ok(_rows(
            (10, "2024-01-02 09:00:00"),
            (11, "2024-01-04 09:00:00"),
        )),
    })


class TestSorting:
    def test_date_key_is_raw_text(self):
        assert changeset_date_key(_record(1, "2024-02-01", "r")) == "2024-02-01"

    def test_descending_lexicographic(self):
        records = [_record(1, "2024-01-09", "r"), _record(2, "2024-01-10", "r")]
        assert [r.id for r in sort_newest_first(records)] == [2, 1]

    def test_ties_keep_input_order(self):
        records = [_record(1, "2024-01-01", "a"), _record(2, "2024-01-01", "b")]
        assert [r.id for r in sort_newest_first(records)] == [1, 2]


class TestListAllChangesets:
    def test_merged_sorted_and_truncated(self, two_repo_runner):
        result = list_all_changesets(EXE, SERVER, 3, runner=two_repo_runner)
        assert [(r.id, r.repository) for r in result] == [
            (3, "game"), (11, "engine"), (2, "game"),
        ]

    def test_default_limit_returns_everything_small(self, two_repo_runner):
        result = list_all_changesets(EXE, SERVER, runner=two_repo_runner)
        assert len(result) == 5
        dates = [r.date for r in result]
        assert dates == sorted(dates, reverse=True)

    def test_none_limit_means_default(self, two_repo_runner):
        assert len(list_all_changesets(EXE, SERVER, None, runner=two_repo_runner)) == 5

    def test_zero_limit(self, two_repo_runner):
        assert list_all_changesets(EXE, SERVER, 0, runner=two_repo_runner) == []

    def test_negative_limit_rejected(self, two_repo_runner):
        with pytest.raises(ValueError):
            list_all_changesets(EXE, SERVER, -1, runner=two_repo_runner)

    @pytest.mark.parametrize("limit", [2.5, "3", True])
    def test_non_integer_limit_rejected(self, limit, two_repo_runner):
        with pytest.raises(ValueError, match="limit must be an integer"):
            list_all_changesets(EXE, SERVER, limit, runner=two_repo_runner)
        assert two_repo_runner.calls == []

    def test_records_tagged_with_short_name(self, two_repo_runner):
        result = list_all_changesets(EXE, SERVER, runner=two_repo_runner)
        assert {r.repository for r in result} == {"game", "engine"}

    def test_one_repository_failing(self, two_repo_runner):
        two_repo_runner.responses[_changesets_call("engine")] = fail("access denied")
        result = list_all_changesets(EXE, SERVER, runner=two_repo_runner)
        assert result == [
            _record(3, "2024-01-05 09:00:00", "game"),
            _record(2, "2024-01-03 09:00:00", "game"),
            _record(1, "2024-01-01 09:00:00", "game"),
        ]

    def test_launch_failure_for_one_repository(self, two_repo_runner):
        two_repo_runner.responses[_changesets_call("game")] = CmLaunchError("cm", (), "gone")
        result = list_all_changesets(EXE, SERVER, runner=two_repo_runner)
        assert [r.id for r in result] == [11, 10]

    def test_all_repositories_failing(self, two_repo_runner):
        two_repo_runner.responses[_changesets_call("game")] = fail("x")
        two_repo_runner.responses[_changesets_call("engine")] = fail("y")
        assert list_all_changesets(EXE, SERVER, runner=two_repo_runner) == []

    def test_malformed_rows_dropped(self):
        runner = FakeRunner({
            _repos_call(): ok("game\n"),
            _changesets_call("game"): ok(
                "1|a|2024-01-01|ok|/main\nnot a row\nX|a|2024-01-02|bad|/main\n"
            ),
        })
        result = list_all_changesets(EXE, SERVER, runner=runner)
        assert [r.id for r in result] == [1]

    def test_repository_queries_sequential_in_listing_order(self, two_repo_runner):
        list_all_changesets(EXE, SERVER, runner=two_repo_runner)
        assert two_repo_runner.calls == [
            _repos_call(), _changesets_call("game"), _changesets_call("engine"),
        ]

    def test_parallel_matches_sequential(self, two_repo_runner):
        sequential = list_all_changesets(EXE, SERVER, 4, runner=two_repo_runner)
        parallel = list_all_changesets(EXE, SERVER, 4, max_workers=4, runner=two_repo_runner)
        assert parallel == sequential


class TestRepositoryListingFailures:
    def test_listing_non_zero_exit(self):
        runner = FakeRunner({_repos_call(): fail("bad server", stdout="partial")})
        with pytest.raises(CmSubcommandError) as excinfo:
            list_all_changesets(EXE, SERVER, runner=runner)
        message = str(excinfo.value)
        assert "stderr: bad server" in message
        assert "stdout: partial" in message

    def test_no_repositories(self):
        runner = FakeRunner({_repos_call(): ok("Repository\n\n")})
        with pytest.raises(NoRepositoriesFoundError) as excinfo:
            list_all_changesets(EXE, SERVER, runner=runner)
        assert excinfo.value.server == SERVER
        assert f"'{SERVER}'" in str(excinfo.value)
        assert "Raw output: Repository" in str(excinfo.value)

    def test_listing_launch_failure_propagates(self):
        with pytest.raises(CmLaunchError):
            list_all_changesets(EXE, SERVER, runner=FakeRunner({}))


class TestOutcomes:
    def test_failures_recorded(self, two_repo_runner):
        two_repo_runner.responses[_changesets_call("engine")] = fail("denied", code=5)
        outcomes = collect_repository_outcomes(EXE, SERVER, runner=two_repo_runner)
        assert [o.name for o in outcomes] == ["game", "engine"]
        assert outcomes[0].ok and len(outcomes[0].records) == 3
        assert not outcomes[1].ok
        assert "exit code 5" in outcomes[1].failure
        assert outcomes[1].records == []


@posix_only
class TestWithFakeCm:
    def test_end_to_end(self, fake_cm):
        fmt = f"--format={CHANGESET_FORMAT} --nototal -n 20"
        cm = fake_cm({
            f"find repos on repserver {SERVER}": (0, "Repository\ngame\nengine\n", ""),
            f"find changesets on repository game@{SERVER} {fmt}": (
                0, "1|alice|2024-01-01|init|/main\n2|bob|2024-01-03|a|b|c|/main\n", "",
            ),
            f"find changesets on repository engine@{SERVER} {fmt}": (1, "", "denied"),
        })
        result = list_all_changesets(ExplicitExecutable(str(cm)), SERVER, 10)
        assert [(r.id, r.comment, r.branch) for r in result] == [
            (2, "a", "b|c|/main"),
            (1, "init", "/main"),
        ]
        assert len(read_calls(cm)) == 3
