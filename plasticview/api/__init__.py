"""Command surface consumed by the GUI frontend."""

from plasticview.api.commands import COMMANDS, invoke
from plasticview.api.facade import PlasticView

__all__ = ["COMMANDS", "PlasticView", "invoke"]
