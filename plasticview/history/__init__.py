"""Cross-repository changeset history."""

from plasticview.history.aggregator import (
    RepositoryOutcome,
    changeset_date_key,
    list_all_changesets,
    sort_newest_first,
)

__all__ = [
    "RepositoryOutcome",
    "changeset_date_key",
    "list_all_changesets",
    "sort_newest_first",
]
