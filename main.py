#!/usr/bin/env python3
"""
Google Docs MCP Server

Usage:
    python main.py --setup                      # authorize once from a terminal
    python main.py                              # serve over stdio (for MCP clients)
    python main.py --transport streamable-http  # serve over HTTP
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any configuration is read
dotenv_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env')
load_dotenv(dotenv_path=dotenv_path)

from core.config import (  # noqa: E402
    VALID_TRANSPORTS,
    get_log_level,
    get_server_host,
    get_server_port,
    get_transport_mode,
    set_transport_mode,
)

# Suppress googleapiclient discovery cache warning
logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.ERROR)

# Logs go to stderr so the stdio transport stays clean
logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Google Docs MCP Server - read, edit and style Google Docs via Model Context Protocol"
    )
    parser.add_argument(
        "--setup",
        action="store_true",
        help="Run the OAuth consent flow in a browser, save the token and exit",
    )
    parser.add_argument(
        "--transport",
        choices=VALID_TRANSPORTS,
        default=get_transport_mode(),
        help="Transport to serve on (default: stdio, or MCP_TRANSPORT env var)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=get_server_host(),
        help="Host for streamable-http (default: 127.0.0.1, or MCP_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=get_server_port(),
        help="Port for streamable-http (default: 8000, or MCP_PORT env var)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    from auth.google_auth import GoogleAuthenticationError, authorize, run_setup
    from auth.services import build_google_services
    from core.server import create_server

    if args.setup:
        try:
            run_setup()
        except GoogleAuthenticationError as e:
            logger.error(f"Setup failed: {e}")
            return 1
        return 0

    try:
        set_transport_mode(args.transport)
        logger.info(f"Transport: {args.transport}")

        # Authorize before starting any listener
        credentials = authorize()
        services = build_google_services(credentials)
        server = create_server(services)
    except Exception as e:
        logger.error(f"FATAL: Server failed to start: {e}", exc_info=True)
        return 1

    try:
        if args.transport == "streamable-http":
            logger.info(f"Starting MCP server on http://{args.host}:{args.port}/mcp")
            server.run(transport="streamable-http", host=args.host, port=args.port)
        else:
            logger.info("Starting MCP server on stdio")
            server.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"FATAL: Server error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
