"""Mind, configuration and session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from hybridops.errors import MindLoadError
from hybridops.mind import thaw
from hybridops.services import get_services

from .models import ConfigResponse, ReloadResponse, SessionResponse

router = APIRouter(tags=["mind"])


@router.get("/mind")
async def mind_metadata() -> dict:
    """Load state, artifacts and decision functions of the shared mind."""
    services = get_services()
    return {
        **services.mind.get_metadata(),
        "sessions": services.sessions.get_stats(),
    }


@router.post("/mind/load")
async def load_mind() -> dict:
    """Load the shared mind if it is not loaded yet."""
    services = get_services()
    try:
        services.mind.load()
    except MindLoadError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return services.mind.get_metadata()


@router.get("/config", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """The configuration the mind is running with, or the raw file before load."""
    services = get_services()
    mind = services.mind
    if mind.loaded:
        config = thaw(mind.bundle.config)
    else:
        config = services.store.get()
    return ConfigResponse(
        source=mind.config_source,
        config=config,
        validation=mind.validation_settings,
    )


@router.post("/config/reload", response_model=ReloadResponse)
async def reload_config() -> ReloadResponse:
    """Re-read the configuration file and recompile on success."""
    mind = get_services().mind
    reloaded = mind.reload_config()
    return ReloadResponse(reloaded=reloaded, config_source=mind.config_source)


@router.get("/telemetry")
async def telemetry_summary() -> dict:
    """Cache, timing and fallback counters."""
    services = get_services()
    return {
        **services.telemetry.get_summary(),
        "recent_fallbacks": services.telemetry.fallbacks[-10:],
    }


@router.post("/sessions/{session_id}", response_model=SessionResponse)
async def open_session(session_id: str) -> SessionResponse:
    """Create or touch a session on the shared mind."""
    try:
        session = get_services().sessions.get_session(session_id)
    except MindLoadError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return SessionResponse(**session.to_dict())


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str) -> dict:
    """End a session; the shared mind stays loaded."""
    if not get_services().sessions.end_session(session_id):
        raise HTTPException(
            status_code=404,
            detail=f"Session '{session_id}' not found",
        )
    return {"session_id": session_id, "ended": True}
