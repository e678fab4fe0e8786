"""plasticview — Plastic SCM history backend for a desktop viewer."""

__version__ = "1.0.0"

from plasticview.api.commands import COMMANDS, invoke
from plasticview.api.facade import PlasticView
from plasticview.cm.errors import (
    CmExecutionError,
    CmLaunchError,
    CmNotFoundError,
    CmSubcommandError,
    NoRepositoriesFoundError,
    PlasticError,
    ServerNotDetectedError,
)
from plasticview.config import Settings, load_settings
from plasticview.models import ChangesetRecord, CommandResult, RepositoryRef

__all__ = [
    "__version__",
    # Facade
    "COMMANDS",
    "PlasticView",
    "invoke",
    # Models
    "ChangesetRecord",
    "CommandResult",
    "RepositoryRef",
    # Errors
    "CmExecutionError",
    "CmLaunchError",
    "CmNotFoundError",
    "CmSubcommandError",
    "NoRepositoriesFoundError",
    "PlasticError",
    "ServerNotDetectedError",
    # Config
    "Settings",
    "load_settings",
]
