"""Tests for the Electron fuse wire writer."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

import pytest

from webcord_forge.fuses import (
    FuseError,
    FuseV1Option,
    SENTINEL,
    apply_fuses,
    flip_fuses,
    parse_fuse_wire,
    read_fuses,
    resolve_fuse_binary,
)


def test_parse_wire_states(electron_binary: Callable[..., bytes]) -> None:
    states = parse_fuse_wire(electron_binary(b"10r1"))
    assert states == {
        FuseV1Option.RunAsNode: "enabled",
        FuseV1Option.EnableCookieEncryption: "disabled",
        FuseV1Option.EnableNodeOptionsEnvironmentVariable: "removed",
        FuseV1Option.EnableNodeCliInspectArguments: "enabled",
    }


def test_apply_patches_every_wire(electron_binary: Callable[..., bytes]) -> None:
    data = bytearray(electron_binary(copies=2))
    wires = apply_fuses(data, {FuseV1Option.RunAsNode: False, FuseV1Option.OnlyLoadAppFromAsar: True})
    assert wires == 2
    for start in (i for i in range(len(data)) if data.startswith(SENTINEL, i)):
        wire = data[start + len(SENTINEL) + 2 : start + len(SENTINEL) + 10]
        assert bytes(wire) == b"01111111"


def test_apply_rejects_missing_sentinel() -> None:
    with pytest.raises(FuseError, match="sentinel"):
        apply_fuses(bytearray(b"not an electron binary"), {FuseV1Option.RunAsNode: False})


def test_apply_rejects_wrong_version(electron_binary: Callable[..., bytes]) -> None:
    with pytest.raises(FuseError, match="version"):
        apply_fuses(bytearray(electron_binary(version=2)), {FuseV1Option.RunAsNode: False})


def test_apply_rejects_removed_fuse(electron_binary: Callable[..., bytes]) -> None:
    with pytest.raises(FuseError, match="removed"):
        apply_fuses(bytearray(electron_binary(b"r111")), {FuseV1Option.RunAsNode: True})


def test_apply_rejects_fuse_beyond_wire(electron_binary: Callable[..., bytes]) -> None:
    with pytest.raises(FuseError, match="not present"):
        apply_fuses(bytearray(electron_binary(b"1111")), {FuseV1Option.OnlyLoadAppFromAsar: True})


def test_flip_fuses_rewrites_file(tmp_path: Path, electron_binary: Callable[..., bytes]) -> None:
    executable = tmp_path / "electron"
    original = electron_binary()
    executable.write_bytes(original)

    asyncio.run(flip_fuses(executable, {FuseV1Option.EnableNodeCliInspectArguments: False}))

    assert len(executable.read_bytes()) == len(original)
    assert read_fuses(executable)[FuseV1Option.EnableNodeCliInspectArguments] == "disabled"
    assert read_fuses(executable)[FuseV1Option.RunAsNode] == "enabled"


def test_flip_fuses_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        asyncio.run(flip_fuses(tmp_path / "electron", {FuseV1Option.RunAsNode: False}))


def test_app_bundle_resolves_to_framework(tmp_path: Path) -> None:
    resolved = resolve_fuse_binary(tmp_path / "Electron.app")
    assert resolved.name == "Electron Framework"
    assert resolve_fuse_binary(tmp_path / "electron.exe") == tmp_path / "electron.exe"


def test_executable_inside_bundle_resolves_to_framework(tmp_path: Path) -> None:
    executable = tmp_path / "Electron.app" / "Contents" / "MacOS" / "Electron"
    expected = (
        tmp_path / "Electron.app" / "Contents" / "Frameworks" / "Electron Framework.framework" / "Electron Framework"
    )
    assert resolve_fuse_binary(executable) == expected
    assert resolve_fuse_binary(tmp_path / "build.app.d" / "electron") == tmp_path / "build.app.d" / "electron"
