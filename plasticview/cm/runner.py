"""Process invocation for the ``cm`` client.

All cm operations go through :func:`run_cm`, which uses
:func:`subprocess.run`; a non-zero exit is returned as data, only a failure
to launch raises.
"""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING, Callable

from plasticview.cm.errors import CmLaunchError, CmSubcommandError
from plasticview.models import CommandResult

if TYPE_CHECKING:
    from plasticview.cm.executable import CmExecutable

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]


def run_cm(executable: CmExecutable, *args: str) -> CommandResult:
    """Execute ``cm`` with *args* and capture its output.

    Parameters
    ----------
    executable:
        The resolved executable; its ``command`` becomes ``argv[0]``.
    *args:
        Arguments passed after the command.

    Raises
    ------
    CmLaunchError
        If the process could not be started (missing file, permissions).
    """
    cmd = [executable.command, *args]
    logger.debug("cm %s (exe=%s)", " ".join(args), executable.describe())
    try:
        proc = subprocess.run(cmd, capture_output=True)
    except OSError as exc:
        logger.warning("Could not launch %s: %s", executable.describe(), exc)
        raise CmLaunchError(executable.command, tuple(args), str(exc)) from exc

    return CommandResult(
        exit_success=proc.returncode == 0,
        returncode=proc.returncode,
        stdout=proc.stdout or b"",
        stderr=proc.stderr or b"",
    )


def run_cm_checked(
    executable: CmExecutable,
    *args: str,
    action: str,
    runner: Runner = run_cm,
) -> CommandResult:
    """Like :func:`run_cm` but raise :class:`CmSubcommandError` on non-zero exit.

    *action* names the subcommand in the error message (e.g. ``"find repos"``).
    """
    result = runner(executable, *args)
    if not result.exit_success:
        stderr = result.stderr_text
        raise CmSubcommandError(
            f"cm {action} failed: {stderr}",
            returncode=result.returncode,
            stderr=stderr,
            stdout=result.stdout_text,
        )
    return result
