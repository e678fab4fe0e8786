"""Executable resolution — decide which ``cm`` binary to launch.

A configured path is either absent (use ``cm`` from PATH) or explicit.
The two cases are separate types so callers branch on them exhaustively
instead of testing for empty strings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from plasticview.cm.errors import CmExecutionError, CmLaunchError, CmNotFoundError
from plasticview.cm.runner import run_cm
from plasticview.config import CM_EXECUTABLE_NAME, DEFAULT_CM_COMMAND

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefaultExecutable:
    """``cm`` resolved through the environment's PATH at launch time."""

    @property
    def command(self) -> str:
        return DEFAULT_CM_COMMAND

    def describe(self) -> str:
        return f"{DEFAULT_CM_COMMAND} (from PATH)"


@dataclass(frozen=True)
class ExplicitExecutable:
    """A caller-configured path, launched verbatim."""

    path: str

    @property
    def command(self) -> str:
        return self.path

    def describe(self) -> str:
        return self.path


CmExecutable = Union[DefaultExecutable, ExplicitExecutable]


def resolve_executable(cm_path: str | None = None) -> CmExecutable:
    """Map an optional configured path to the executable to launch.

    ``None`` and the empty string both mean "use the default".
    """
    if cm_path:
        return ExplicitExecutable(cm_path)
    return DefaultExecutable()


def validate_cm_path(cm_path: str) -> str:
    """Check that *cm_path* points at a working ``cm`` client.

    Parameters
    ----------
    cm_path:
        A file path, or a directory expected to contain
        :data:`~plasticview.config.CM_EXECUTABLE_NAME`.

    Returns
    -------
    str
        The resolved executable path, suitable for saving as
        configuration.

    Raises
    ------
    CmNotFoundError
        The resolved path does not exist.
    CmLaunchError
        The file exists but could not be started.
    CmExecutionError
        ``cm version`` ran but exited non-zero.
    """
    path = Path(cm_path)
    resolved = path / CM_EXECUTABLE_NAME if path.is_dir() else path

    if not resolved.exists():
        raise CmNotFoundError(str(resolved))

    executable = ExplicitExecutable(str(resolved))
    try:
        result = run_cm(executable, "version")
    except CmLaunchError as exc:
        raise CmLaunchError(
            exc.command,
            exc.cm_args,
            exc.reason,
            message=f"Failed to execute {CM_EXECUTABLE_NAME}: {exc.reason}",
        ) from exc

    if not result.exit_success:
        raise CmExecutionError(
            str(resolved),
            f"{CM_EXECUTABLE_NAME} found but failed to execute 'cm version'",
        )

    logger.info("Validated cm executable at %s", resolved)
    return str(resolved)
