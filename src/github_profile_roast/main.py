from logging import Logger
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import get_logger

from github_profile_roast.clients.gemini import GeminiClient
from github_profile_roast.clients.github import GitHubProfileClient
from github_profile_roast.config import GeminiSettings, GitHubSettings
from github_profile_roast.servers.roast import RoastServer

logger: Logger = get_logger(name=__name__)

mcp: FastMCP[None] = FastMCP[None](name="GitHub Profile Roast")

mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

roast_server: RoastServer = RoastServer(
    profile_client=GitHubProfileClient(settings=GitHubSettings.from_env(), logger=logger),
    gemini_client=GeminiClient(settings=GeminiSettings.from_env(), logger=logger),
    logger=logger,
)
_ = roast_server.register_tools(fastmcp=mcp)


@click.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
def run_mcp(mcp_transport: Literal["stdio", "streamable-http"]):
    mcp.run(transport=mcp_transport)


if __name__ == "__main__":
    run_mcp()
