"""Server-wide changeset history — fan out over every repository.

One ``cm find changesets`` query runs per repository. A repository whose
query fails is skipped; only a failure to list the repositories at all
aborts the aggregate. Results are merged, sorted newest first and
truncated to the requested limit.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from plasticview.cm.errors import CmLaunchError, CmSubcommandError, NoRepositoriesFoundError
from plasticview.cm.executable import CmExecutable
from plasticview.cm.parsing import parse_changesets, repository_names
from plasticview.cm.runner import Runner, run_cm
from plasticview.config import CHANGESET_FORMAT, DEFAULT_CHANGESET_LIMIT, PER_REPOSITORY_LIMIT
from plasticview.models import ChangesetRecord

logger = logging.getLogger(__name__)


@dataclass
class RepositoryOutcome:
    """Result of querying a single repository."""

    name: str
    records: list[ChangesetRecord] = field(default_factory=list)
    failure: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def changeset_date_key(changeset: ChangesetRecord) -> str:
    """Sort key for changeset recency.

    Dates are compared as plain text, which orders correctly only while
    ``cm`` prints a uniform, zero-padded ISO-8601-like format.
    """
    return changeset.date


def sort_newest_first(changesets: list[ChangesetRecord]) -> list[ChangesetRecord]:
    """Return *changesets* ordered by descending date (stable for ties)."""
    return sorted(changesets, key=changeset_date_key, reverse=True)


def list_server_repositories(
    executable: CmExecutable,
    server: str,
    *,
    runner: Runner = run_cm,
) -> list[str]:
    """Return the repository names on *server* for fan-out.

    Raises
    ------
    CmSubcommandError
        ``cm find repos`` exited non-zero.
    NoRepositoriesFoundError
        The listing contained no usable names.
    """
    result = runner(executable, "find", "repos", "on", "repserver", server)
    stdout = result.stdout_text
    if not result.exit_success:
        stderr = result.stderr_text
        raise CmSubcommandError(
            f"Failed to list repos (stderr: {stderr.strip()}, stdout: {stdout.strip()})",
            returncode=result.returncode,
            stderr=stderr,
            stdout=stdout,
        )

    names = repository_names(stdout)
    if not names:
        raise NoRepositoriesFoundError(server, stdout.strip())
    return names


def query_repository(
    executable: CmExecutable,
    name: str,
    server: str,
    *,
    runner: Runner = run_cm,
) -> RepositoryOutcome:
    """Fetch recent changesets for one repository, never raising for cm failures."""
    repo_full = f"{name}@{server}"
    try:
        result = runner(
            executable,
            "find", "changesets",
            "on", "repository", repo_full,
            f"--format={CHANGESET_FORMAT}",
            "--nototal",
            "-n", str(PER_REPOSITORY_LIMIT),
        )
    except CmLaunchError as exc:
        logger.warning("Skipping %s: %s", repo_full, exc)
        return RepositoryOutcome(name=name, failure=str(exc))

    if not result.exit_success:
        reason = f"exit code {result.returncode}: {result.stderr_text.strip()}"
        logger.warning("Skipping %s: %s", repo_full, reason)
        return RepositoryOutcome(name=name, failure=reason)

    records = parse_changesets(result.stdout_text, name)
    logger.debug("Read %d changesets from %s", len(records), repo_full)
    return RepositoryOutcome(name=name, records=records)


def collect_repository_outcomes(
    executable: CmExecutable,
    server: str,
    *,
    max_workers: int = 1,
    runner: Runner = run_cm,
) -> list[RepositoryOutcome]:
    """Query every repository on *server*, in listing order.

    With ``max_workers > 1`` the queries run on a bounded thread pool; the
    returned list keeps listing order either way.
    """
    names = list_server_repositories(executable, server, runner=runner)

    if max_workers <= 1 or len(names) == 1:
        return [query_repository(executable, n, server, runner=runner) for n in names]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(names))) as pool:
        return list(
            pool.map(
                lambda n: query_repository(executable, n, server, runner=runner),
                names,
            )
        )


def list_all_changesets(
    executable: CmExecutable,
    server: str,
    limit: int | None = DEFAULT_CHANGESET_LIMIT,
    *,
    max_workers: int = 1,
    runner: Runner = run_cm,
) -> list[ChangesetRecord]:
    """Return the newest changesets across all repositories on *server*.

    Parameters
    ----------
    executable:
        The ``cm`` client to launch.
    server:
        Server identifier, e.g. ``myorg@cloud``.
    limit:
        Maximum number of records returned. *None* means the default (100).
    max_workers:
        Number of repository queries allowed to run at once.

    Returns an empty list when every repository query fails.
    """
    if limit is None:
        limit = DEFAULT_CHANGESET_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValueError(f"limit must be an integer, got {limit!r}")
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    outcomes = collect_repository_outcomes(
        executable, server, max_workers=max_workers, runner=runner,
    )

    merged: list[ChangesetRecord] = []
    for outcome in outcomes:
        merged.extend(outcome.records)

    failed = sum(1 for o in outcomes if not o.ok)
    result = sort_newest_first(merged)[:limit]
    logger.info(
        "Collected %d changesets from %d repositories on %s (%d skipped), returning %d",
        len(merged), len(outcomes), server, failed, len(result),
    )
    return result
