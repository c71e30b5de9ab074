"""Build identity and environment snapshot for a packaging run."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

BuildType = Literal["devel", "release"]

DEFAULT_FLATPAK_ID = "io.github.spacingbat3.webcord"

RELEASE_IDENTIFIERS = frozenset({"release", "stable"})

ELECTRON_PATHS: Dict[str, str] = {
    "darwin": "Electron.app/Contents/MacOS/Electron",
    "win32": "electron.exe",
}
LINUX_ELECTRON_PATH = "electron"


@dataclass(frozen=True, slots=True)
class BuildEnvironment:
    """Snapshot of the ``WEBCORD_*`` variables taken once per packaging run."""

    build: Optional[str] = None
    app_user_model_id: Optional[str] = None
    flatpak_id: str = DEFAULT_FLATPAK_ID
    asar: bool = True
    update_notifications: bool = True
    flatpak: bool = False

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildEnvironment":
        environ = os.environ if environ is None else environ
        build = environ.get("WEBCORD_BUILD")
        flatpak_id = environ.get("WEBCORD_FLATPAK_ID")
        return cls(
            build=build.lower() if build is not None else None,
            app_user_model_id=environ.get("WEBCORD_WIN32_APPID"),
            flatpak_id=flatpak_id.lower() if flatpak_id is not None else DEFAULT_FLATPAK_ID,
            asar=environ.get("WEBCORD_ASAR", "").lower() != "false",
            # Compared case-sensitively, unlike the other toggles.
            update_notifications=environ.get("WEBCORD_UPDATE_NOTIFICATIONS") != "false",
            flatpak=environ.get("WEBCORD_FLATPAK", "").lower() == "true",
        )

    @property
    def build_id(self) -> BuildType:
        return get_build_id(self)

    @property
    def is_devel(self) -> bool:
        return self.build_id == "devel"


@dataclass(frozen=True, slots=True)
class BuildInfo:
    """Contents of the ``buildInfo.json`` manifest shipped with the app."""

    type: BuildType
    commit: Optional[str] = None
    app_user_model_id: Optional[str] = None
    features: Dict[str, bool] = field(default_factory=lambda: {"updateNotifications": True})

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.app_user_model_id is not None:
            data["AppUserModelId"] = self.app_user_model_id
        data["type"] = self.type
        if self.commit is not None:
            data["commit"] = self.commit
        data["features"] = dict(self.features)
        return data


def get_build_id(env: BuildEnvironment) -> BuildType:
    """Map the build identity to ``release`` or ``devel``.

    Unknown values fall back to ``devel`` so existing deployment scripts
    passing arbitrary identifiers keep working.
    """

    if env.build in RELEASE_IDENTIFIERS:
        return "release"
    return "devel"


def get_electron_path(platform: str) -> str:
    """Relative path of the Electron executable inside a packaged tree."""

    return ELECTRON_PATHS.get(platform, LINUX_ELECTRON_PATH)


async def get_commit(project_path: Path) -> Optional[str]:
    """Resolve the checked out commit hash from ``.git/HEAD``.

    Returns ``None`` when HEAD is not a symbolic ref. Missing files are not
    handled and raise ``FileNotFoundError``.
    """

    git_dir = Path(project_path) / ".git"
    head = await asyncio.to_thread((git_dir / "HEAD").read_text, encoding="utf-8")
    parts = head.split(": ")
    if len(parts) < 2:
        return None
    ref = parts[1].strip()
    content = await asyncio.to_thread((git_dir / ref).read_text, encoding="utf-8")
    return content.strip()


__all__ = [
    "BuildEnvironment",
    "BuildInfo",
    "BuildType",
    "DEFAULT_FLATPAK_ID",
    "get_build_id",
    "get_commit",
    "get_electron_path",
]
