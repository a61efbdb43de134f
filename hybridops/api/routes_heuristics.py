"""Heuristic listing and evaluation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from hybridops.errors import InvalidInputError, MindLoadError, UnknownHeuristicError
from hybridops.heuristics import STRICT_INPUTS, DecisionFunction
from hybridops.services import Services, get_services

from .models import EvaluateRequest, HeuristicSummary

router = APIRouter(prefix="/heuristics", tags=["heuristics"])


def _resolve_function(services: Services, heuristic_id: str) -> DecisionFunction:
    """Prefer the mind's configured function; fall back to the compiler."""
    mind = services.mind
    try:
        bundle = mind.bundle if mind.loaded else mind.load()
    except MindLoadError as e:
        raise HTTPException(status_code=503, detail=str(e))
    fn = bundle.decision_function(heuristic_id)
    if fn is not None:
        return fn
    try:
        return services.compiler.compile(heuristic_id)
    except UnknownHeuristicError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("", response_model=list[HeuristicSummary])
async def list_heuristics() -> list[HeuristicSummary]:
    """List built-in and registered heuristics."""
    compiler = get_services().compiler
    summaries = []
    for heuristic_id in compiler.available_heuristics():
        meta = compiler.get_heuristic_metadata(heuristic_id)
        summaries.append(HeuristicSummary(
            id=heuristic_id,
            name=meta["name"],
            domain=meta["domain"],
            kind=meta["kind"],
            custom=meta["kind"] == "custom",
            compiled=meta["compiled"],
        ))
    return summaries


@router.get("/stats")
async def compiler_stats() -> dict:
    """Compiler cache statistics."""
    return get_services().compiler.get_stats()


@router.get("/{heuristic_id}")
async def get_heuristic(heuristic_id: str) -> dict:
    """Metadata for one heuristic."""
    meta = get_services().compiler.get_heuristic_metadata(heuristic_id)
    if meta is None:
        raise HTTPException(
            status_code=404,
            detail=f"Heuristic '{heuristic_id}' not found",
        )
    return meta


@router.post("/{heuristic_id}/evaluate")
async def evaluate_heuristic(heuristic_id: str, request: EvaluateRequest) -> dict[str, Any]:
    """
    Run a decision function against a context.

    Field aliases (``executionsPerMonth``, ``endStateVision.clarity``, ...)
    are accepted. With ``strict`` the built-in inputs are schema-checked
    first and rejected with 422 instead of defaulting to zero.
    """
    services = get_services()
    fn = _resolve_function(services, heuristic_id)

    context: dict[str, Any] = request.context
    if request.strict and heuristic_id in STRICT_INPUTS:
        try:
            context = STRICT_INPUTS[heuristic_id].from_context(context).model_dump()
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    try:
        result = fn(context)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})

    if hasattr(result, "to_json_dict"):
        return result.to_json_dict()
    return result
