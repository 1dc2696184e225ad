"""FastAPI application exposing pool state and TWAP queries.

The API is read-only: it serves whatever PoolRegistry the hosting process
installs through the get_registry dependency.
"""

import os

import uvicorn
from fastapi import FastAPI

from pairswap import __version__
from pairswap.api.endpoints import router
from pairswap.log_config import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("PAIRSWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("PAIRSWAP_PORT", "8000"))
DEBUG = os.environ.get("PAIRSWAP_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="pairswap",
    description="Read API for two-asset AMM pools",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - PAIRSWAP_HOST: Host to bind to (default: 0.0.0.0)
    - PAIRSWAP_PORT: Port to bind to (default: 8000)
    - PAIRSWAP_DEBUG: Enable debug logging and reload mode (default: false)
    """
    configure_logging("DEBUG" if DEBUG else "INFO")
    uvicorn.run(
        "pairswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
