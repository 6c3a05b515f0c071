"""Server bootstrap for the parasearch MCP service.

Creates the FastMCP instance, configures stderr logging, registers the
search tool and starts the MCP server (stdio transport).
"""

from mcp.server.fastmcp import FastMCP

from config import LOG_LEVEL
from core.log import configure_logging

from tools.search_text import register as register_search_text

mcp = FastMCP("parasearch")


def register_tools() -> None:
    register_search_text(mcp)


def register_all() -> None:
    register_tools()


register_all()


def main() -> None:
    # stdout carries the stdio transport; diagnostics go to stderr
    configure_logging(LOG_LEVEL)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
