"""MCP server exposing the page cloning tool to agent hosts."""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from .config import SnapshotConfig
from .pipeline import clone_website as run_clone_website

logger = logging.getLogger("page_snapshot.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="page-snapshot")


@mcp.tool()
async def clone_website(url: str, folder_name: str = "") -> str:
    """Clone the visible UI of a web page into a folder of HTML, CSS and assets."""
    return await run_clone_website(url, folder_name or None, SnapshotConfig())


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
