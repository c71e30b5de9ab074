"""Packaging configuration for the WebCord desktop application."""

from importlib.metadata import PackageNotFoundError, version

from .build_config import BuildEnvironment, BuildInfo, get_build_id, get_commit, get_electron_path
from .forge_config import ForgeConfig, MakerDescriptor, PublisherDescriptor, build_forge_config
from .package_meta import PackageMetadata, Person

try:
    __version__ = version("webcord-forge")
except PackageNotFoundError:  # pragma: no cover - package metadata absent in dev
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "BuildEnvironment",
    "BuildInfo",
    "ForgeConfig",
    "MakerDescriptor",
    "PackageMetadata",
    "Person",
    "PublisherDescriptor",
    "build_forge_config",
    "get_build_id",
    "get_commit",
    "get_electron_path",
]
