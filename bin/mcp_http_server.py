"""HTTP front end for the Terraform Docs MCP tools (streamable HTTP at /mcp)."""

import logging
import os
import sys
from contextlib import asynccontextmanager

# Set up paths dynamically
# This script is in bin/, so go up one level for APP_ROOT
BIN_DIR = os.path.dirname(os.path.abspath(__file__))
APP_ROOT = os.path.dirname(BIN_DIR)

# Add APP_ROOT to sys.path so we can find core and mcp_servers packages
if APP_ROOT not in sys.path:
    sys.path.insert(0, APP_ROOT)

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from core.config import Settings
from mcp_servers.terraform_docs_mcp import create_mcp
from mcp_servers.terraform_docs_server import MCPTerraformDocsServer, build_server

logger = logging.getLogger(__name__)


def create_app(server: MCPTerraformDocsServer) -> FastAPI:
    # stateless JSON responses: every POST /mcp is answered on its own
    mcp = create_mcp(server, host="0.0.0.0", json_response=True, stateless_http=True)
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            async with mcp.session_manager.run():
                yield
        finally:
            server.close()

    app = FastAPI(title="Terraform Docs MCP", version=server.settings.server_version, lifespan=lifespan)

    @app.get("/health")
    async def health():
        return JSONResponse({
            "status": "ok",
            "server": server.settings.server_name,
            "version": server.settings.server_version,
            **server.service.stats(),
        })

    # the MCP app routes /mcp itself; mounted last so /health wins
    app.mount("/", mcp_app)
    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    port = int(os.getenv("PORT", "9595"))
    logger.info(f"Starting uvicorn server on http://0.0.0.0:{port}")
    uvicorn.run(create_app(build_server(settings)), host="0.0.0.0", port=port)
