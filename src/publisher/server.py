"""Local preview server for the published firmware tree (ota-serve)."""

import argparse
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Sequence

from fastapi import FastAPI
import uvicorn

from publisher.api.routes import router
from publisher.models.config import DEFAULT_OUT_ROOT
from publisher.utils.logging import setup_logger

DEFAULT_PORT = 8266


def create_app(firmware_root: Path = Path(DEFAULT_OUT_ROOT)) -> FastAPI:
    """Build the FastAPI app serving firmware_root under /firmware."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = logging.getLogger("publisher.server")
        root = Path(app.state.firmware_root)
        if not root.is_dir():
            logger.warning(f"Firmware root does not exist yet: {root}")
        logger.info(f"Serving {root.resolve()} at /firmware")
        yield
        logger.info("Preview server shutting down...")

    app = FastAPI(
        title="ESPHome OTA Publisher",
        description="Preview of published OTA manifests and binaries",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.firmware_root = Path(firmware_root)
    app.include_router(router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "ota-publisher",
            "firmware_root": str(app.state.firmware_root),
        }

    return app


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for running the preview server."""
    parser = argparse.ArgumentParser(prog="ota-serve", description=__doc__)
    parser.add_argument("--root", default=DEFAULT_OUT_ROOT, help="output root to serve")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    setup_logger("publisher", "./logs/publisher.log", level=logging.INFO)
    uvicorn.run(
        create_app(Path(args.root)),
        host=args.host,
        port=args.port,
        log_level="info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
