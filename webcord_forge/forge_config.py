"""Assemble the configuration consumed by the packaging framework."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from loguru import logger

from .build_config import BuildEnvironment, BuildType, get_build_id
from .hooks import ICON_FILE, package_after_copy, package_after_extract
from .package_meta import PackageMetadata

Hook = Callable[..., Awaitable[None]]

DESKTOP_GENERIC_NAME = "Internet Messenger"
DESKTOP_CATEGORIES: Tuple[str, ...] = ("Network", "InstantMessaging")
DEFAULT_REPOSITORY_OWNER = "SpacingBat3"
REPOSITORY_NAME = "WebCord"
FLATPAK_RUNTIME_VERSION = "21.08"

IGNORE_PATTERNS: Tuple[re.Pattern[str], ...] = (
    # directories
    re.compile(r"sources/app/.build"),
    re.compile(r"out/"),
    re.compile(r"schemas/"),
    # files
    re.compile(r"\.eslintrc\.json$"),
    re.compile(r"tsconfig\.json$"),
    re.compile(r"sources/app/forge/config\..*"),
    re.compile(r"sources/code/.*"),
    re.compile(r"sources/assets/icons/app\.icns$"),
    # hidden files
    re.compile(r"^\.[a-z]+$"),
    re.compile(r".*/\.[a-z]+$"),
)


def _plain(value: Any) -> Any:
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True, slots=True)
class PackagerConfig:
    """Options forwarded to electron-packager."""

    executable_name: str
    asar: bool
    icon: str = ICON_FILE
    extra_resource: Tuple[str, ...] = ("LICENSE",)
    quiet: bool = True
    ignore: Tuple[re.Pattern[str], ...] = IGNORE_PATTERNS
    extend_info: Mapping[str, str] = field(
        default_factory=lambda: {
            "NSMicrophoneUsageDescription": "This lets this app to internally manage the microphone access.",
            "NSCameraUsageDescription": "This lets this app to internally manage the camera access.",
        }
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executableName": self.executable_name,
            "asar": self.asar,
            "icon": self.icon,
            "extraResource": list(self.extra_resource),
            "quiet": self.quiet,
            "ignore": _plain(self.ignore),
            "extendInfo": dict(self.extend_info),
        }


@dataclass(frozen=True, slots=True)
class MakerDescriptor:
    """A maker plugin producing one distributable format."""

    name: str
    platforms: Optional[Tuple[str, ...]] = None
    config: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.platforms is not None:
            data["platforms"] = list(self.platforms)
        if self.config:
            data["config"] = _plain(self.config)
        return data


@dataclass(frozen=True, slots=True)
class PublisherDescriptor:
    """A publisher plugin uploading the made artifacts."""

    name: str
    config: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "config": _plain(self.config)}


@dataclass(frozen=True, slots=True)
class ForgeConfig:
    """Configuration object handed to the packaging framework."""

    project_path: Path
    environment: BuildEnvironment
    metadata: PackageMetadata
    packager_config: PackagerConfig
    makers: Tuple[MakerDescriptor, ...]
    publishers: Tuple[PublisherDescriptor, ...]
    hooks: Mapping[str, Hook]

    def build_identifier(self) -> BuildType:
        return get_build_id(self.environment)

    def maker_names(self) -> List[str]:
        return [maker.name for maker in self.makers]

    def to_dict(self) -> Dict[str, Any]:
        """Declarative part of the config; hooks are listed by name only."""

        return {
            "buildIdentifier": self.build_identifier(),
            "packagerConfig": self.packager_config.to_dict(),
            "makers": [maker.to_dict() for maker in self.makers],
            "publishers": [publisher.to_dict() for publisher in self.publishers],
            "hooks": sorted(self.hooks),
        }


def _linux_options(**extra: Any) -> Dict[str, Any]:
    return {
        "options": {
            "icon": ICON_FILE + ".png",
            **extra,
            "genericName": DESKTOP_GENERIC_NAME,
            "categories": list(DESKTOP_CATEGORIES),
        }
    }


def build_makers(env: BuildEnvironment) -> List[MakerDescriptor]:
    devel = env.is_devel
    return [
        MakerDescriptor(name="@electron-forge/maker-zip", platforms=("win32",)),
        MakerDescriptor(
            name="@electron-forge/maker-dmg",
            config={"icon": ICON_FILE + ".icns", "debug": devel},
        ),
        MakerDescriptor(name="@reforged/maker-appimage", config=_linux_options()),
        MakerDescriptor(name="@electron-forge/maker-deb", config=_linux_options(section="web")),
        MakerDescriptor(name="@electron-forge/maker-rpm", config=_linux_options()),
    ]


def build_flatpak_maker(
    env: BuildEnvironment, metadata: PackageMetadata, project_path: Path
) -> MakerDescriptor:
    return MakerDescriptor(
        name="@electron-forge/maker-flatpak",
        config={
            "options": {
                "id": env.flatpak_id,
                "genericName": DESKTOP_GENERIC_NAME,
                "categories": list(DESKTOP_CATEGORIES),
                "runtimeVersion": FLATPAK_RUNTIME_VERSION,
                "baseVersion": FLATPAK_RUNTIME_VERSION,
                "files": [
                    [f"{project_path}/docs", f"/share/docs/{metadata.name}"],
                    [f"{project_path}/LICENSE", f"/share/licenses/{metadata.name}/LICENSE.txt"],
                ],
                "icon": ICON_FILE + ".png",
            }
        },
    )


def build_publisher(env: BuildEnvironment, metadata: PackageMetadata) -> PublisherDescriptor:
    owner = metadata.author.name if metadata.author is not None else DEFAULT_REPOSITORY_OWNER
    return PublisherDescriptor(
        name="@electron-forge/publisher-github",
        config={
            "prerelease": env.is_devel,
            "repository": {"owner": owner, "name": REPOSITORY_NAME},
            "draft": False,
        },
    )


def build_forge_config(
    project_path: Path,
    env: Optional[BuildEnvironment] = None,
    metadata: Optional[PackageMetadata] = None,
) -> ForgeConfig:
    """Return the complete packaging configuration for ``project_path``.

    ``env`` defaults to a snapshot of the current process environment and
    ``metadata`` to the project's ``package.json``.
    """

    project_path = Path(project_path).resolve()
    env = env if env is not None else BuildEnvironment.from_environ()
    metadata = metadata if metadata is not None else PackageMetadata.load(project_path)

    makers = build_makers(env)
    # maker-flatpak fails with an unhelpful exit code when the user has no
    # Flathub remote configured, so it is opt-in.
    if env.flatpak:
        makers.append(build_flatpak_maker(env, metadata, project_path))

    config = ForgeConfig(
        project_path=project_path,
        environment=env,
        metadata=metadata,
        packager_config=PackagerConfig(executable_name=metadata.name, asar=env.asar),
        makers=tuple(makers),
        publishers=(build_publisher(env, metadata),),
        hooks={
            "packageAfterCopy": package_after_copy,
            "packageAfterExtract": package_after_extract,
        },
    )
    logger.debug(
        "Assembled {} config for {} with makers: {}",
        config.build_identifier(),
        metadata.name,
        ", ".join(config.maker_names()),
    )
    return config


__all__ = [
    "ForgeConfig",
    "MakerDescriptor",
    "PackagerConfig",
    "PublisherDescriptor",
    "build_forge_config",
    "build_makers",
    "build_publisher",
]
