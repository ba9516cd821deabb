from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


class StubModuleLogger:
    """Captures structured log payloads for assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[str, Dict[str, Any]]] = []

    def info(self, payload: Dict[str, Any]) -> None:
        self.records.append(("info", payload))

    def warning(self, payload: Dict[str, Any]) -> None:
        self.records.append(("warning", payload))

    def error(self, payload: Dict[str, Any]) -> None:
        self.records.append(("error", payload))

    def debug(self, payload: Dict[str, Any]) -> None:
        self.records.append(("debug", payload))

    def events(self, level: str | None = None) -> list[Dict[str, Any]]:
        return [
            payload
            for record_level, payload in self.records
            if level is None or record_level == level
        ]


@pytest.fixture
def diagnostics() -> StubModuleLogger:
    return StubModuleLogger()
