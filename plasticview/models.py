"""Typed records returned to the frontend.

All models are frozen; ``model_dump()`` gives the JSON-like shape the GUI
consumes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RepositoryRef(BaseModel):
    """A repository hosted on a Plastic server."""

    model_config = ConfigDict(frozen=True)

    name: str
    server: str


class ChangesetRecord(BaseModel):
    """One committed revision.

    ``date`` is kept exactly as ``cm`` prints it and ordered as text.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    author: str
    date: str
    comment: str
    branch: str
    repository: str


class CommandResult(BaseModel):
    """Captured outcome of a single ``cm`` invocation."""

    model_config = ConfigDict(frozen=True)

    exit_success: bool
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")
