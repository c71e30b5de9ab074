"""Pytest configuration for the packaging config tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from webcord_forge.fuses import SENTINEL  # noqa: E402


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A minimal checkout with package metadata and a git HEAD on main."""

    root = tmp_path / "project"
    (root / ".git" / "refs" / "heads").mkdir(parents=True)
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (root / ".git" / "refs" / "heads" / "main").write_text("abc123\n", encoding="utf-8")
    (root / "package.json").write_text(
        json.dumps({"name": "webcord", "author": "SpacingBat3 <git@spacingbat3.anonaddy.com>"}),
        encoding="utf-8",
    )
    return root


@pytest.fixture
def electron_binary() -> Callable[..., bytes]:
    """Factory for fake Electron executables carrying a fuse wire."""

    def make(wire: bytes = b"11111111", copies: int = 1, version: int = 1) -> bytes:
        chunk = SENTINEL + bytes([version, len(wire)]) + wire
        return b"\x7fELF" + b"\x00" * 32 + (chunk + b"\x00" * 16) * copies

    return make
