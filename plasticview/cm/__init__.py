"""Plastic SCM ``cm`` client integration.

All cm operations use :func:`subprocess.run`; nothing here talks to a
Plastic server directly.
"""

from plasticview.cm.errors import (
    CmExecutionError,
    CmLaunchError,
    CmNotFoundError,
    CmSubcommandError,
    NoRepositoriesFoundError,
    PlasticError,
    ServerNotDetectedError,
)
from plasticview.cm.executable import (
    CmExecutable,
    DefaultExecutable,
    ExplicitExecutable,
    resolve_executable,
    validate_cm_path,
)
from plasticview.cm.queries import check_installed, detect_server, list_repositories
from plasticview.cm.runner import run_cm

__all__ = [
    "CmExecutable",
    "CmExecutionError",
    "CmLaunchError",
    "CmNotFoundError",
    "CmSubcommandError",
    "DefaultExecutable",
    "ExplicitExecutable",
    "NoRepositoriesFoundError",
    "PlasticError",
    "ServerNotDetectedError",
    "check_installed",
    "detect_server",
    "list_repositories",
    "resolve_executable",
    "run_cm",
    "validate_cm_path",
]
