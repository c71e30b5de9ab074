"""Electron fuse wire reader and writer.

Electron binaries embed a "fuse wire" right after a fixed sentinel string::

    <sentinel> <version byte> <length byte> <wire: one byte per fuse>

Each wire byte is ``0`` (disabled), ``1`` (enabled) or ``r`` (removed from
this Electron release). Flipping fuses rewrites those bytes in place, so the
hardened binary cannot re-enable a capability at runtime.
"""

from __future__ import annotations

import asyncio
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Mapping

from loguru import logger

SENTINEL = b"dL7pKGdnNz796PbbjQWNKmHXBZaB9tsX"
FUSE_VERSION = 1

DISABLED = ord("0")
ENABLED = ord("1")
REMOVED = ord("r")

_DARWIN_FRAMEWORK = Path("Contents") / "Frameworks" / "Electron Framework.framework" / "Electron Framework"


class FuseV1Option(IntEnum):
    RunAsNode = 0
    EnableCookieEncryption = 1
    EnableNodeOptionsEnvironmentVariable = 2
    EnableNodeCliInspectArguments = 3
    EnableEmbeddedAsarIntegrityValidation = 4
    OnlyLoadAppFromAsar = 5
    LoadBrowserProcessSpecificV8Snapshot = 6
    GrantFileProtocolExtraPrivileges = 7


class FuseError(RuntimeError):
    """Raised when a binary's fuse wire cannot be read or flipped."""


def resolve_fuse_binary(executable: Path) -> Path:
    """Map an ``.app`` bundle, or an executable inside one, to the framework binary carrying the wire."""

    executable = Path(executable)
    if executable.suffix == ".app":
        return executable / _DARWIN_FRAMEWORK
    if any(part.endswith(".app") for part in executable.parts[:-1]):
        # Contents/MacOS/<name> -> Contents/Frameworks/...
        return executable.parent.parent / _DARWIN_FRAMEWORK.relative_to("Contents")
    return executable


def _wire_offsets(data: bytes | bytearray) -> List[int]:
    offsets = []
    start = data.find(SENTINEL)
    while start != -1:
        offsets.append(start + len(SENTINEL))
        start = data.find(SENTINEL, start + 1)
    if not offsets:
        raise FuseError("Could not find the fuse sentinel in the binary")
    return offsets


def _check_header(data: bytes | bytearray, offset: int) -> int:
    if offset + 2 > len(data):
        raise FuseError("Fuse wire header is truncated")
    version = data[offset]
    if version != FUSE_VERSION:
        raise FuseError(f"Unsupported fuse wire version {version}, expected {FUSE_VERSION}")
    length = data[offset + 1]
    if offset + 2 + length > len(data):
        raise FuseError("Fuse wire is truncated")
    return length


def parse_fuse_wire(data: bytes | bytearray) -> Dict[FuseV1Option, str]:
    """Decode the first fuse wire found in ``data``.

    Values are ``"enabled"``, ``"disabled"`` or ``"removed"``. Fuses newer
    than this module are skipped.
    """

    offset = _wire_offsets(data)[0]
    length = _check_header(data, offset)
    wire = data[offset + 2 : offset + 2 + length]
    states = {DISABLED: "disabled", ENABLED: "enabled", REMOVED: "removed"}
    result: Dict[FuseV1Option, str] = {}
    for index, value in enumerate(wire):
        try:
            option = FuseV1Option(index)
        except ValueError:
            continue
        if value not in states:
            raise FuseError(f"Unexpected wire byte {value!r} for fuse {option.name}")
        result[option] = states[value]
    return result


def apply_fuses(data: bytearray, options: Mapping[FuseV1Option, bool]) -> int:
    """Flip ``options`` on every wire in ``data``; return the number of wires."""

    offsets = _wire_offsets(data)
    for offset in offsets:
        length = _check_header(data, offset)
        for option, enabled in options.items():
            if option >= length:
                raise FuseError(f"Fuse {option.name} is not present in this Electron binary")
            position = offset + 2 + option
            if data[position] == REMOVED:
                raise FuseError(f"Fuse {option.name} has been removed from this Electron binary")
            data[position] = ENABLED if enabled else DISABLED
    return len(offsets)


def read_fuses(executable: Path) -> Dict[FuseV1Option, str]:
    binary = resolve_fuse_binary(executable)
    return parse_fuse_wire(binary.read_bytes())


def _flip_fuses_sync(executable: Path, options: Mapping[FuseV1Option, bool]) -> int:
    binary = resolve_fuse_binary(executable)
    data = bytearray(binary.read_bytes())
    wires = apply_fuses(data, options)
    binary.write_bytes(bytes(data))
    return wires


async def flip_fuses(executable: Path, options: Mapping[FuseV1Option, bool]) -> int:
    """Rewrite the fuse wires of ``executable`` in place.

    Any failure propagates so the packaging run aborts.
    """

    wires = await asyncio.to_thread(_flip_fuses_sync, Path(executable), options)
    logger.info(
        "Flipped {} fuse(s) on {} wire(s) in {}",
        len(options),
        wires,
        executable,
    )
    for option, enabled in options.items():
        logger.debug("Fuse {} -> {}", option.name, "enabled" if enabled else "disabled")
    return wires


__all__ = [
    "FUSE_VERSION",
    "FuseError",
    "FuseV1Option",
    "SENTINEL",
    "apply_fuses",
    "flip_fuses",
    "parse_fuse_wire",
    "read_fuses",
    "resolve_fuse_binary",
]
