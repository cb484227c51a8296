import logging
from importlib import metadata

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.services import GoogleServices
from core.config import get_transport_mode
from gdocs.docs_tools import register_docs_tools
from gdrive.drive_tools import register_drive_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "google_docs"
PACKAGE_NAME = "google-docs-mcp"


def _package_version() -> str:
    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return "dev"


async def health_check(request: Request):
    return JSONResponse(
        {
            "status": "healthy",
            "service": PACKAGE_NAME,
            "version": _package_version(),
            "transport": get_transport_mode(),
        }
    )


def create_server(services: GoogleServices) -> FastMCP:
    """
    Build the FastMCP server with every Docs and Drive tool registered.

    Args:
        services: Authorized Google API clients shared by all tools
    """
    server = FastMCP(name=SERVER_NAME)
    server.custom_route("/health", methods=["GET"])(health_check)

    docs_tools = register_docs_tools(server, services)
    drive_tools = register_drive_tools(server, services)
    logger.info(
        f"Registered {len(docs_tools)} Docs tools and {len(drive_tools)} Drive tools"
    )
    return server
