"""Serve the Terraform Docs MCP tools over stdio."""

import logging
import os
import sys

# Set up paths dynamically
# This script is in bin/, so go up one level for APP_ROOT
BIN_DIR = os.path.dirname(os.path.abspath(__file__))
APP_ROOT = os.path.dirname(BIN_DIR)

# Add APP_ROOT to sys.path so we can find core and mcp_servers packages
if APP_ROOT not in sys.path:
    sys.path.insert(0, APP_ROOT)

from core.config import Settings
from mcp_servers.terraform_docs_mcp import create_mcp
from mcp_servers.terraform_docs_server import build_server

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.server_name} {settings.server_version} on stdio")
    server = build_server(settings)
    try:
        create_mcp(server).run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        server.close()


if __name__ == "__main__":
    main()
