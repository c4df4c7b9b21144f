"""FastAPI application for the What's Next graph service."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import GraphStoreError
from ..services import InMemoryGraphStore, SQLiteSnapshotStore
from .config import WhatsNextConfig
from .routes import router

logger = logging.getLogger("whatsnext.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    When ``db.path`` is configured the graph is loaded from the snapshot
    file on startup and written back on shutdown. A store handed in with
    data already in it is kept as is and the snapshot is not loaded.
    """
    config: WhatsNextConfig = app.state.config

    # Validate config
    errors = config.validate()
    if errors:
        raise ValueError(f"Configuration errors: {errors}")

    store: InMemoryGraphStore = app.state.store
    snapshots: Optional[SQLiteSnapshotStore] = None
    if config.db.path:
        snapshots = SQLiteSnapshotStore(config.db.path)
        try:
            if any(store.stats().values()):
                logger.warning(
                    f"Store already holds data; not loading {config.db.path}"
                )
            else:
                store.restore(snapshots.load())
                logger.info(f"Graph loaded from {config.db.path} ({store.stats()})")
        except Exception:
            snapshots.close()
            raise
    else:
        logger.info("No db.path configured; graph is kept in memory only")

    yield

    if snapshots is not None:
        try:
            snapshots.save(store.snapshot())
        finally:
            snapshots.close()
    logger.info("Shutting down What's Next service")


async def graph_store_error_handler(
    request: Request, exc: GraphStoreError
) -> JSONResponse:
    """Project a store error onto its HTTP status."""
    logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    config: Optional[WhatsNextConfig] = None,
    store: Optional[InMemoryGraphStore] = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Service configuration. If None, loads from environment.
        store: Graph store to serve. A fresh in-memory store if None.

    Returns:
        Configured FastAPI application.
    """
    if config is None:
        config = WhatsNextConfig.from_env()

    app = FastAPI(
        title="What's Next",
        description="Knowledge graph of people, events and connections",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store if store is not None else InMemoryGraphStore()

    # CORS middleware (localhost only, any port for the dev UI)
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GraphStoreError, graph_store_error_handler)
    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "service": "whats-next",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app


def run_server(
    config: Optional[WhatsNextConfig] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: str = "info",
):
    """Run the HTTP server.

    Args:
        config: Service configuration. If None, loads from environment.
        host: Override host from config.
        port: Override port from config.
        log_level: Logging level.
    """
    if config is None:
        config = WhatsNextConfig.from_env()

    app = create_app(config)

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=log_level,
    )


# CLI entry point
def main():
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="What's Next HTTP Server")
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config file (default: ~/.whats-next/config.yaml)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to bind to (default: 3001)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level",
    )

    args = parser.parse_args()

    # Load config
    if args.config:
        config = WhatsNextConfig.from_file(args.config)
    else:
        config = WhatsNextConfig.from_env()

    run_server(
        config=config,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
