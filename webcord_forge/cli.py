"""Command line entry point running the packaging config and hooks."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from loguru import logger

from .build_config import BuildEnvironment
from .forge_config import ForgeConfig, build_forge_config
from .fuses import FuseError, read_fuses
from .logger import setup_logging

PLATFORMS = ("darwin", "linux", "mas", "win32")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="webcord-forge", description="WebCord packaging configuration")
    parser.add_argument("--project", type=Path, default=Path.cwd(), help="Project root holding package.json")
    parser.add_argument("--verbose", action="store_true", help="Enable debug output")
    parser.add_argument("--log-file", help="Also write JSON log records to this file")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("config", help="Print the declarative packaging config as JSON")

    for name, help_text in (
        ("after-copy", "Run the post-copy hook on a packaged app directory"),
        ("after-extract", "Run the post-extract hook on an extracted Electron tree"),
    ):
        hook = commands.add_parser(name, help=help_text)
        hook.add_argument("path", type=Path)
        hook.add_argument("--platform", choices=PLATFORMS, required=True)
        hook.add_argument("--electron-version", default="")

    fuses = commands.add_parser("fuses", help="Show the fuse wire of an Electron binary")
    fuses.add_argument("executable", type=Path)
    return parser.parse_args(argv)


def _load_config(project: Path) -> ForgeConfig:
    load_dotenv(project / ".env", override=False)
    return build_forge_config(project, BuildEnvironment.from_environ())


def run(args: argparse.Namespace) -> int:
    if args.command == "fuses":
        for option, state in read_fuses(args.executable).items():
            print(f"{option.name}: {state}")
        return 0

    config = _load_config(args.project)
    if args.command == "config":
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    hook_name = "packageAfterCopy" if args.command == "after-copy" else "packageAfterExtract"
    logger.info("Running {} hook on {}", hook_name, args.path)
    asyncio.run(config.hooks[hook_name](config, args.path, args.electron_version, args.platform))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(console_level="DEBUG" if args.verbose else "INFO", log_file=args.log_file)
    try:
        return run(args)
    except (OSError, ValueError, FuseError) as exc:
        logger.error("Packaging step failed: {}", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
