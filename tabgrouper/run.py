"""Programmatic uvicorn entry point for tabgrouper.

Reads host and port from the loaded config (127.0.0.1:4343 by default).

Usage:
    python -m tabgrouper.run
    tabgrouper                 # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from tabgrouper.config import load_config

# Low keep-alive keeps idle UI connections from piling up.
UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the tabgrouper command server.

    Raises:
        SystemExit: Propagated from load_config() on config parse errors.
    """
    config = load_config()

    uvicorn.run(
        "tabgrouper.main:app",
        host=config.server.host,
        port=config.server.port,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
