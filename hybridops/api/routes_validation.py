"""Axiom validation and checkpoint gate endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from hybridops.gates import GateResult
from hybridops.services import get_services

from .models import AxiomValidateRequest, GateExecuteRequest

router = APIRouter(tags=["validation"])


@router.post("/axioms/validate")
async def validate_axioms(request: AxiomValidateRequest) -> dict:
    """
    Score content against the axiom levels.

    ``min_score`` and ``strict`` default to the active configuration's
    ``validation.minimum_score`` and ``validation.strict_mode``.
    """
    services = get_services()
    settings = services.mind.validation_settings
    min_score = request.min_score if request.min_score is not None else settings["minimum_score"]
    strict = request.strict if request.strict is not None else settings["strict_mode"]

    try:
        result = services.axiom_validator.validate(
            request.content,
            levels=request.levels,
            min_score=min_score,
            strict=strict,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    payload = result.model_dump(mode="json")
    if request.include_report:
        payload["report"] = services.axiom_validator.generate_report(result)
    return payload


@router.get("/axioms/history")
async def axiom_history(limit: int = Query(10, ge=1, le=100)) -> dict:
    """Most recent validations, oldest first."""
    validator = get_services().axiom_validator
    return {
        "total": validator.history_size,
        "entries": [entry.model_dump(mode="json") for entry in validator.get_history(limit)],
    }


@router.post("/gates/execute", response_model=GateResult)
async def execute_gate(request: GateExecuteRequest) -> GateResult:
    """Run one checkpoint; configuration errors come back as error results."""
    return get_services().gate.execute(request.phase, request.context)
