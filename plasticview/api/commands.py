"""Async command handlers exposed to the GUI frontend.

The frontend calls :func:`invoke` with a command name and a dict of
arguments and always gets back a plain dict::

    {"ok": True, "data": ...}
    {"ok": False, "error": "human readable message"}

Blocking cm work runs in a worker thread via :func:`asyncio.to_thread`, so
several commands can be in flight on one event loop.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, ValidationError, validate_call

from plasticview.api.facade import PlasticView
from plasticview.cm.errors import PlasticError
from plasticview.models import ChangesetRecord, RepositoryRef

logger = logging.getLogger(__name__)

# Frontend arguments arrive as JSON; no coercion between types.
_strict_args = validate_call(config=ConfigDict(strict=True))


@_strict_args
async def check_installed(cm_path: str | None = None) -> bool:
    return await asyncio.to_thread(PlasticView(cm_path).check_installed)


@_strict_args
async def validate_path(cm_path: str) -> str:
    return await asyncio.to_thread(PlasticView().validate_path, cm_path)


@_strict_args
async def detect_server(cm_path: str | None = None) -> str:
    return await asyncio.to_thread(PlasticView(cm_path).detect_server)


@_strict_args
async def list_repositories(server: str, cm_path: str | None = None) -> list[RepositoryRef]:
    return await asyncio.to_thread(PlasticView(cm_path).list_repositories, server)


@_strict_args
async def list_all_changesets(
    server: str,
    limit: int | None = None,
    cm_path: str | None = None,
) -> list[ChangesetRecord]:
    return await asyncio.to_thread(PlasticView(cm_path).list_all_changesets, server, limit)


COMMANDS: dict[str, Callable[..., Awaitable[Any]]] = {
    "check_installed": check_installed,
    "validate_path": validate_path,
    "detect_server": detect_server,
    "list_repositories": list_repositories,
    "list_all_changesets": list_all_changesets,
}


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


async def invoke(name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
    """Run command *name* with *args* and wrap the outcome for the frontend.

    Failures are reported as an error string; nothing is raised for
    unknown commands, bad arguments, or cm errors.
    """
    handler = COMMANDS.get(name)
    if handler is None:
        return {"ok": False, "error": f"Unknown command: {name}"}

    args = args or {}
    try:
        inspect.signature(handler).bind(**args)
    except TypeError as exc:
        return {"ok": False, "error": f"Invalid arguments for {name}: {exc}"}

    try:
        data = await handler(**args)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return {"ok": False, "error": f"Invalid arguments for {name}: {errors}"}
    except (PlasticError, ValueError) as exc:
        logger.info("Command %s failed: %s", name, exc)
        return {"ok": False, "error": str(exc)}

    return {"ok": True, "data": _to_jsonable(data)}
