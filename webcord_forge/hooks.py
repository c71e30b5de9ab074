"""Lifecycle hooks invoked by the packaging framework."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Dict

from loguru import logger

from .build_config import BuildInfo, get_commit, get_electron_path
from .fuses import FuseV1Option, flip_fuses

if TYPE_CHECKING:
    from .forge_config import ForgeConfig

ICON_FILE = "sources/assets/icons/app"
BUILD_INFO_FILE = "buildInfo.json"


async def write_build_info(forge_config: "ForgeConfig", path: Path, platform: str) -> Path:
    env = forge_config.environment
    commit = await get_commit(forge_config.project_path) if env.is_devel else None
    info = BuildInfo(
        type=env.build_id,
        commit=commit,
        app_user_model_id=env.app_user_model_id if platform == "win32" else None,
        features={"updateNotifications": env.update_notifications},
    )
    target = Path(path) / BUILD_INFO_FILE
    await asyncio.to_thread(target.write_text, json.dumps(info.to_dict(), indent=2), encoding="utf-8")
    logger.info("Wrote {} build info to {}", info.type, target)
    return target


async def remove_unused_platform_data(path: Path, platform: str) -> bool:
    """Delete the icon format the target platform never reads."""

    extension = ".png" if platform == "win32" else ".ico"
    icon = Path(path) / (ICON_FILE + extension)
    if not await asyncio.to_thread(icon.exists):
        logger.debug("No {} icon to remove in {}", extension, path)
        return False
    await asyncio.to_thread(icon.unlink)
    logger.info("Removed unused icon {}", icon)
    return True


async def package_after_copy(
    forge_config: "ForgeConfig", path: str | Path, electron_version: str, platform: str
) -> None:
    await asyncio.gather(
        write_build_info(forge_config, Path(path), platform),
        remove_unused_platform_data(Path(path), platform),
    )


def fuse_options(forge_config: "ForgeConfig") -> Dict[FuseV1Option, bool]:
    """Hardening applied to release builds, relaxed for devel builds."""

    env = forge_config.environment
    devel = env.is_devel
    return {
        FuseV1Option.OnlyLoadAppFromAsar: env.asar,
        FuseV1Option.RunAsNode: devel,
        FuseV1Option.EnableNodeOptionsEnvironmentVariable: devel,
        FuseV1Option.EnableNodeCliInspectArguments: devel,
    }


async def package_after_extract(
    forge_config: "ForgeConfig", path: str | Path, electron_version: str, platform: str
) -> None:
    executable = Path(path) / get_electron_path(platform)
    logger.debug("Hardening Electron {} binary for {}", electron_version, platform)
    await flip_fuses(executable, fuse_options(forge_config))


__all__ = [
    "BUILD_INFO_FILE",
    "ICON_FILE",
    "fuse_options",
    "package_after_copy",
    "package_after_extract",
    "remove_unused_platform_data",
    "write_build_info",
]
