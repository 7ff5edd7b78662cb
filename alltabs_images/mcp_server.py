"""MCP server exposing the tab image download commands."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .commands import run_command
from .config import HarvestConfig

logger = logging.getLogger("alltabs_images.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="alltabs-images")


@mcp.tool()
async def download() -> Dict[str, Any]:
    """Download every unique image from the tabs of the attached browser."""
    return await run_command("download", HarvestConfig.from_env())


@mcp.tool()
async def download_largest() -> Dict[str, Any]:
    """Download the largest image of each tab of the attached browser."""
    return await run_command("download-largest", HarvestConfig.from_env())


@mcp.tool()
async def set_folder(folder: Optional[str] = None) -> Dict[str, Any]:
    """Change the folder inside downloads that receives images."""
    return await run_command("set-folder", HarvestConfig.from_env(), folder=folder)


@mcp.tool()
async def get_folder() -> Dict[str, Any]:
    """Return the folder inside downloads that receives images."""
    return await run_command("get-folder", HarvestConfig.from_env())


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
