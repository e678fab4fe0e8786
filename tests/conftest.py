"""Shared fixtures: a scriptable fake ``cm`` executable and fake runners."""

from __future__ import annotations

import stat
import sys
from pathlib import Path
from typing import Callable

import pytest

from plasticview.cm.errors import CmLaunchError
from plasticview.models import CommandResult

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake cm is a POSIX shell script")


def _sh_quote(text: str) -> str:
    return "'" + text.replace("'", "'\\''") + "'"


def write_fake_cm(
    path: Path,
    responses: dict[str, tuple[int, str, str]],
) -> Path:
    """Write a shell script that answers cm invocations from *responses*.

    Keys are the space-joined argument lists; values are
    ``(exit_code, stdout, stderr)``. Unknown invocations exit 1. Every call
    is appended to ``calls.log`` beside the script.
    """
    log = path.parent / "calls.log"
    lines = [
        "#!/bin/sh",
        f"printf '%s\\n' \"$*\" >> {_sh_quote(str(log))}",
    ]
    for key, (code, out, err) in responses.items():
        lines.append(f"if [ \"$*\" = {_sh_quote(key)} ]; then")
        if out:
            lines.append(f"  printf '%s' {_sh_quote(out)}")
        if err:
            lines.append(f"  printf '%s' {_sh_quote(err)} >&2")
        lines.append(f"  exit {code}")
        lines.append("fi")
    lines.append("echo \"unknown command: $*\" >&2")
    lines.append("exit 1")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def read_calls(cm: Path) -> list[str]:
    log = cm.parent / "calls.log"
    if not log.is_file():
        return []
    return log.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def fake_cm(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: ``fake_cm(responses)`` returns the script path."""

    def _make(responses: dict[str, tuple[int, str, str]], name: str = "cm") -> Path:
        return write_fake_cm(tmp_path / "bin" / name, responses)

    return _make


def ok(stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(
        exit_success=True,
        returncode=0,
        stdout=stdout.encode("utf-8"),
        stderr=stderr.encode("utf-8"),
    )


def fail(stderr: str = "", stdout: str = "", code: int = 1) -> CommandResult:
    return CommandResult(
        exit_success=False,
        returncode=code,
        stdout=stdout.encode("utf-8"),
        stderr=stderr.encode("utf-8"),
    )


class FakeRunner:
    """In-process stand-in for :func:`plasticview.cm.runner.run_cm`.

    *responses* maps argument tuples to a :class:`CommandResult` or an
    exception instance to raise.
    """

    def __init__(self, responses: dict[tuple[str, ...], object]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, executable, *args: str) -> CommandResult:
        self.calls.append(args)
        response = self.responses.get(args)
        if response is None:
            raise CmLaunchError(executable.command, args, "No such file or directory")
        if isinstance(response, Exception):
            raise response
        return response
