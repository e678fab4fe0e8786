"""Text parsers for ``cm`` output.

Everything here is pure string handling so it can be tested without a
``cm`` binary. Changeset rows are parsed into explicit :class:`ParsedRow`
results; skipped rows carry a :class:`SkipReason` even though the public
helpers drop them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from plasticview.config import REPOSITORY_HEADER, REPOSITORY_HEADERS
from plasticview.models import ChangesetRecord, RepositoryRef

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
CHANGESET_FIELDS = 5

# cm changeset ids are 32-bit signed integers written in ASCII digits
_CHANGESET_ID = re.compile(r"[+-]?[0-9]+")
_ID_MIN = -(2**31)
_ID_MAX = 2**31 - 1


class SkipReason(str, Enum):
    """Why a changeset row produced no record."""

    BLANK = "blank"
    TOO_FEW_FIELDS = "too_few_fields"
    INVALID_ID = "invalid_id"


@dataclass(frozen=True)
class ParsedRow:
    """Outcome of parsing one output line: a record or a skip reason."""

    line: str
    record: ChangesetRecord | None = None
    skip_reason: SkipReason | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


# -- Changesets ---------------------------------------------------------------


def parse_changeset_line(line: str, repository: str) -> ParsedRow:
    """Parse one ``id|owner|date|comment|branch`` line.

    The line is split into at most five fields, so separators past the
    fourth stay inside the last field.
    """
    text = line.strip()
    if not text:
        return ParsedRow(line=line, skip_reason=SkipReason.BLANK)

    parts = text.split(FIELD_SEPARATOR, CHANGESET_FIELDS - 1)
    if len(parts) < CHANGESET_FIELDS:
        return ParsedRow(line=line, skip_reason=SkipReason.TOO_FEW_FIELDS)

    if not _CHANGESET_ID.fullmatch(parts[0]):
        return ParsedRow(line=line, skip_reason=SkipReason.INVALID_ID)
    changeset_id = int(parts[0])
    if not _ID_MIN <= changeset_id <= _ID_MAX:
        return ParsedRow(line=line, skip_reason=SkipReason.INVALID_ID)

    record = ChangesetRecord(
        id=changeset_id,
        author=parts[1],
        date=parts[2],
        comment=parts[3],
        branch=parts[4],
        repository=repository,
    )
    return ParsedRow(line=line, record=record)


def iter_changeset_rows(output: str, repository: str) -> Iterator[ParsedRow]:
    """Lazily yield one :class:`ParsedRow` per output line."""
    for line in output.splitlines():
        yield parse_changeset_line(line, repository)


def parse_changesets(output: str, repository: str) -> list[ChangesetRecord]:
    """Return the records in *output*, silently dropping malformed rows."""
    records: list[ChangesetRecord] = []
    for row in iter_changeset_rows(output, repository):
        if row.record is not None:
            records.append(row.record)
        elif row.skip_reason is not SkipReason.BLANK:
            logger.debug("Skipped changeset row (%s): %r", row.skip_reason.value, row.line)
    return records


# -- Repositories -------------------------------------------------------------


def parse_repository_listing(output: str, server: str) -> list[RepositoryRef]:
    """Turn ``cm find repos`` output into refs paired with *server*.

    Blank lines and the ``Repository`` header are ignored; input order is
    kept and duplicates are passed through.
    """
    repos: list[RepositoryRef] = []
    for line in output.splitlines():
        line = line.strip()
        if line and not line.startswith(REPOSITORY_HEADER):
            repos.append(RepositoryRef(name=line, server=server))
    return repos


def repository_names(output: str) -> list[str]:
    """Return repository names, skipping blanks and both header variants."""
    return [
        line
        for line in (raw.strip() for raw in output.splitlines())
        if line and not line.startswith(REPOSITORY_HEADERS)
    ]


# -- Servers ------------------------------------------------------------------


def server_from_repository_line(line: str) -> str | None:
    """Extract a cloud server from an ``lrep`` line.

    ``repo@org@cloud`` gives ``org@cloud``; with only two segments the last
    segment is taken alone. Returns *None* when the line does not name a
    cloud server.
    """
    line = line.strip()
    if "@" not in line or "cloud" not in line:
        return None

    parts = line.split("@")
    if len(parts) >= 3:
        server = f"{parts[-2]}@{parts[-1]}"
    else:
        server = parts[-1]
    return server or None


def server_from_repository_listing(output: str) -> str | None:
    """Return the first cloud server named in ``cm lrep`` output."""
    for line in output.splitlines():
        server = server_from_repository_line(line)
        if server:
            return server
    return None


def server_from_server_listing(output: str) -> str | None:
    """Return the first ``cm listservers`` line mentioning ``cloud``."""
    for line in output.splitlines():
        line = line.strip()
        if "cloud" in line:
            return line
    return None
