"""PlasticView — the single entry point for all cm-backed operations.

Usage::

    from plasticview import PlasticView

    pv = PlasticView(cm_path="/opt/plasticscm5/client/cm")
    pv.check_installed()
    server = pv.detect_server()
    pv.list_repositories(server)
    pv.list_all_changesets(server, limit=50)
"""

from __future__ import annotations

import logging
from pathlib import Path

from plasticview.cm import executable as exe_ops
from plasticview.cm import queries
from plasticview.cm.executable import CmExecutable
from plasticview.config import Settings, configure_logging, load_settings, save_cm_path
from plasticview.history import aggregator
from plasticview.models import ChangesetRecord, RepositoryRef

logger = logging.getLogger(__name__)


class PlasticView:
    """Unified facade over the cm client.

    Parameters
    ----------
    cm_path:
        Path to the ``cm`` executable. *None* or ``""`` falls back to
        ``Settings.cm_path`` and then to ``cm`` on PATH.
    settings:
        Pre-loaded settings. Loaded from *config_dir* when omitted.
    config_dir:
        Directory holding ``config.json``.
    setup_logging:
        Host entry points pass *True* to attach a root handler at
        ``Settings.log_level``. Library callers leave logging alone.
    """

    def __init__(
        self,
        cm_path: str | None = None,
        *,
        settings: Settings | None = None,
        config_dir: str | Path | None = None,
        setup_logging: bool = False,
    ) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else None
        self.settings = settings if settings is not None else load_settings(self.config_dir)
        if setup_logging:
            configure_logging(self.settings.log_level)
        self.cm_path = cm_path or self.settings.cm_path

    @property
    def executable(self) -> CmExecutable:
        """The executable every call launches."""
        return exe_ops.resolve_executable(self.cm_path)

    # -- Setup ----------------------------------------------------------------

    def check_installed(self) -> bool:
        """Return *True* if ``cm version`` succeeds."""
        return queries.check_installed(self.executable)

    def validate_path(self, cm_path: str, *, save: bool = False) -> str:
        """Validate *cm_path* and return the resolved executable path.

        With *save*, the path is also written to ``config.json`` and used
        for subsequent calls on this instance.
        """
        resolved = exe_ops.validate_cm_path(cm_path)
        if save:
            save_cm_path(resolved, self.config_dir)
            self.cm_path = resolved
        return resolved

    # -- Discovery ------------------------------------------------------------

    def detect_server(self) -> str:
        """Return the Plastic Cloud server identifier."""
        return queries.detect_server(self.executable)

    def list_repositories(self, server: str) -> list[RepositoryRef]:
        """Return the repositories hosted on *server*."""
        return queries.list_repositories(self.executable, server)

    # -- History --------------------------------------------------------------

    def list_all_changesets(
        self,
        server: str,
        limit: int | None = None,
    ) -> list[ChangesetRecord]:
        """Return the newest changesets across every repository on *server*."""
        if limit is None:
            limit = self.settings.changeset_limit
        return aggregator.list_all_changesets(
            self.executable,
            server,
            limit,
            max_workers=self.settings.max_workers,
        )
