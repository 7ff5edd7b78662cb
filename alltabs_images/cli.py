"""Command-line entry point for downloading images from browser tabs."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .commands import run_command
from .config import DEFAULT_CDP_ENDPOINT, HarvestConfig, default_downloads_root, default_settings_path
from .folders import console_prompt, default_prompt

logger = logging.getLogger("alltabs_images.cli")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings-file",
        type=Path,
        default=default_settings_path(),
        help="JSON file where the destination folder is remembered",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_download_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cdp-endpoint",
        default=DEFAULT_CDP_ENDPOINT,
        help="DevTools endpoint of a browser started with --remote-debugging-port",
    )
    parser.add_argument(
        "--launch",
        nargs="+",
        metavar="URL",
        default=None,
        help="Open these URLs in a headless browser instead of attaching to one",
    )
    parser.add_argument(
        "--downloads-dir",
        type=Path,
        default=default_downloads_root(),
        help="Downloads root; images are saved in the configured folder below it",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=1.0,
        help="Seconds to wait after network idle when using --launch",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds when using --launch",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=60.0,
        help="Timeout in seconds for each image request",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download the images shown in the tabs of a Chromium browser window.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    download_parser = subparsers.add_parser(
        "download", help="Download every unique image from all tabs"
    )
    _add_download_arguments(download_parser)

    largest_parser = subparsers.add_parser(
        "download-largest", help="Download the largest image of each tab"
    )
    _add_download_arguments(largest_parser)

    set_parser = subparsers.add_parser(
        "set-folder", help="Change the folder inside downloads that receives images"
    )
    set_parser.add_argument(
        "folder",
        nargs="?",
        default=None,
        help="New folder name; prompts for one when omitted",
    )
    _add_common_arguments(set_parser)

    get_parser = subparsers.add_parser("get-folder", help="Show the current folder")
    _add_common_arguments(get_parser)

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> HarvestConfig:
    config = HarvestConfig(settings_path=Path(args.settings_file).expanduser())
    if args.command in ("download", "download-largest"):
        config.cdp_endpoint = args.cdp_endpoint
        config.downloads_root = Path(args.downloads_dir).expanduser().resolve()
        config.wait_after_load = args.wait
        config.navigation_timeout = args.timeout
        config.request_timeout = args.request_timeout
    return config


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = _build_config(args)
    prompt = console_prompt if sys.stdin.isatty() else default_prompt
    response = asyncio.run(
        run_command(
            args.command,
            config,
            launch_urls=getattr(args, "launch", None),
            folder=getattr(args, "folder", None),
            prompt=prompt,
        )
    )
    sys.stdout.write(json.dumps(response) + "\n")
    sys.stdout.flush()
    if args.command == "get-folder":
        return 0
    return 0 if response.get("ok") else 1


if __name__ == "__main__":
    sys.exit(main())
