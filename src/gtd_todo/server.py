"""
gtd-todo MCP server entry point.

Startup sequence:
1. Resolve the todo file (TODO_FILE env, ~/.todo/config, default)
2. Create the store directory and file if missing
3. Start REST API server in background thread (if API_ENABLED)
4. Register all MCP tools
5. Run MCP server (stdio transport)
"""

import logging
import os
import sys
import threading

from mcp.server.fastmcp import FastMCP

from gtd_todo.config import env_flag, resolve_config
from gtd_todo.errors import StoreUnavailable
from gtd_todo.tools import register_todo_tools

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)
log = logging.getLogger(__name__)

DEFAULT_API_PORT = 9410


def _start_api_server(store, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from gtd_todo.api.app import create_app

    app = create_app(store)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")


def main() -> None:
    config = resolve_config()
    log.info("Todo file: %s (from %s)", config.todo_file, config.source)

    store = config.store()
    try:
        store.ensure_exists()
    except StoreUnavailable as e:
        log.error("%s", e.message)
        sys.exit(1)

    # Start REST API in a daemon thread
    if env_flag("API_ENABLED", default=False):
        api_port = int(os.environ.get("API_PORT", str(DEFAULT_API_PORT)))
        api_thread = threading.Thread(
            target=_start_api_server, args=(store, api_port), daemon=True
        )
        api_thread.start()

    # Create MCP server and register tools
    mcp = FastMCP("gtd-todo")
    register_todo_tools(mcp, store)

    log.info("Starting gtd-todo server")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
