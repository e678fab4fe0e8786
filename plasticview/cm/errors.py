"""Error types raised while driving the ``cm`` command-line client.

Every error's ``str()`` is a complete, human-readable message; the command
surface sends exactly that text to the frontend.
"""

from __future__ import annotations


class PlasticError(Exception):
    """Base class for all plasticview failures."""


class CmLaunchError(PlasticError):
    """Raised when the ``cm`` process could not be started at all."""

    def __init__(
        self,
        command: str,
        cm_args: tuple[str, ...],
        reason: str,
        *,
        message: str | None = None,
    ) -> None:
        self.command = command
        self.cm_args = cm_args
        self.reason = reason
        if message is None:
            message = f"Failed to run cm {' '.join(cm_args)}: {reason}"
        super().__init__(message)


class CmNotFoundError(PlasticError):
    """Raised when a path being validated does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class CmExecutionError(PlasticError):
    """Raised when ``cm`` starts but reports failure during validation."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)


class CmSubcommandError(PlasticError):
    """Raised when a required subcommand exits non-zero."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        stdout: str = "",
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(message)


class ServerNotDetectedError(PlasticError):
    """Raised when no Plastic Cloud server can be found."""

    def __init__(self) -> None:
        super().__init__(
            "Could not detect Plastic Cloud server. "
            "Please ensure you're logged in."
        )


class NoRepositoriesFoundError(PlasticError):
    """Raised when a server listing yields no repository names."""

    def __init__(self, server: str, raw_output: str) -> None:
        self.server = server
        self.raw_output = raw_output
        super().__init__(
            f"No repositories found on server '{server}'. "
            f"Raw output: {raw_output}"
        )
