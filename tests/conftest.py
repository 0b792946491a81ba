"""Pytest configuration for the `tests/` suite.

Puts `src/` on `sys.path` so the suite runs from a plain checkout as well as
from an editable install, and provides a fake command runner that hands back
canned output instead of spawning processes.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

import pytest

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from fs_analyzer.collectors.command_runner import CommandRunner  # noqa: E402


class FakeRunner(CommandRunner):
    def __init__(self, outputs: dict[tuple[str, ...], str | None] | None = None) -> None:
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[tuple[str, ...], float]] = []

    def run(self, argv: Sequence[str], timeout: float) -> str | None:
        key = tuple(argv)
        self.calls.append((key, timeout))
        return self.outputs.get(key)


@pytest.fixture
def fake_runner():
    return FakeRunner()
