"""FastAPI application entry point."""

import asyncio
import os
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hybridops import __version__
from hybridops.api import heuristics_router, mind_router, validation_router
from hybridops.core import get_settings
from hybridops.observability import Telemetry, configure_logging
from hybridops.services import get_services


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the config watcher and session sweeper; stop them on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    log = Telemetry()
    log.info("app", "starting", {"name": settings.app_name, "config_path": settings.config_path})

    services = get_services()
    services.store.start_watcher_task()
    sweeper = asyncio.create_task(
        services.sessions.run_sweeper(settings.session_sweep_interval_seconds)
    )

    yield

    log.info("app", "shutting_down")
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    services.shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Heuristic compilation, axiom validation and workflow checkpoints",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware - configurable via CORS_ORIGINS env var
    cors_origins_str = os.getenv("CORS_ORIGINS", "*")
    cors_origins = cors_origins_str.split(",") if cors_origins_str != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(heuristics_router)   # /heuristics
    app.include_router(validation_router)   # /axioms, /gates
    app.include_router(mind_router)         # /mind, /config, /sessions, /telemetry

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "endpoints": {
                "heuristics": "/heuristics - List, inspect and evaluate decision functions",
                "axioms": "/axioms/validate - Score content against the axiom levels",
                "gates": "/gates/execute - Run a workflow checkpoint",
                "mind": "/mind - Shared mind state",
                "config": "/config, /config/reload - Active configuration and hot reload",
                "sessions": "/sessions/{id} - Open or end a session",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        services = get_services()
        return {
            "status": "healthy",
            "mind_loaded": services.mind.loaded,
            "config_loaded": services.store.is_loaded,
            "watching": services.store.is_watching,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
