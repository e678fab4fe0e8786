"""Single-shot ``cm`` queries: install check, server detection, repo listing."""

from __future__ import annotations

import logging

from plasticview.cm.errors import CmLaunchError, ServerNotDetectedError
from plasticview.cm.executable import CmExecutable
from plasticview.cm.parsing import (
    parse_repository_listing,
    server_from_repository_listing,
    server_from_server_listing,
)
from plasticview.cm.runner import Runner, run_cm, run_cm_checked
from plasticview.models import RepositoryRef

logger = logging.getLogger(__name__)


def check_installed(executable: CmExecutable, *, runner: Runner = run_cm) -> bool:
    """Return *True* if ``cm version`` launches and exits zero.

    A launch failure means "not installed", not an error.
    """
    try:
        result = runner(executable, "version")
    except CmLaunchError:
        return False
    return result.exit_success


def detect_server(executable: CmExecutable, *, runner: Runner = run_cm) -> str:
    """Find the Plastic Cloud server the client is configured for.

    ``cm lrep`` is scanned first; ``cm listservers`` is the fallback.

    Raises
    ------
    CmLaunchError
        Either subcommand could not be started.
    ServerNotDetectedError
        Neither subcommand names a cloud server.
    """
    result = runner(executable, "lrep")
    if result.exit_success:
        server = server_from_repository_listing(result.stdout_text)
        if server:
            logger.info("Detected server %s from cm lrep", server)
            return server

    result = runner(executable, "listservers")
    if result.exit_success:
        server = server_from_server_listing(result.stdout_text)
        if server:
            logger.info("Detected server %s from cm listservers", server)
            return server

    raise ServerNotDetectedError()


def list_repositories(
    executable: CmExecutable,
    server: str,
    *,
    runner: Runner = run_cm,
) -> list[RepositoryRef]:
    """Return the repositories hosted on *server*.

    Raises :class:`~plasticview.cm.errors.CmSubcommandError` if
    ``cm find repos`` exits non-zero.
    """
    result = run_cm_checked(
        executable,
        "find", "repos", "on", "repserver", f"'{server}'",
        action="find repos",
        runner=runner,
    )
    repos = parse_repository_listing(result.stdout_text, server)
    logger.info("Found %d repositories on %s", len(repos), server)
    return repos
