"""
Trigger endpoints for pattern registration and job pickup.

HTTP adapter over one DirectoryTrigger held in app.state.trigger.
Registration errors surface as 400; nothing here touches the filesystem.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from watchtrigger.triggers import (
    DirectoryTrigger,
    InvalidPatternError,
    JobDescriptor,
    PathPattern,
    TriggerStateError,
    TriggerStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trigger", tags=["trigger"])


class RegisterPatternsRequest(BaseModel):
    """Request body for pattern registration."""

    model_config = ConfigDict(extra="forbid")

    whitelist: List[str] = Field(..., min_length=1)
    blacklist: List[str] = Field(default_factory=list)
    offset: Optional[str] = None


class UnregisterPatternRequest(BaseModel):
    """Request body naming patterns the same way they were registered."""

    model_config = ConfigDict(extra="forbid")

    whitelist: List[str] = Field(..., min_length=1)
    blacklist: List[str] = Field(default_factory=list)


class PatternInfo(BaseModel):
    """Serialized pattern identity."""

    model_config = ConfigDict(extra="forbid")

    job_id: str
    whitelist: List[str]
    blacklist: List[str]
    offset: Optional[str] = None


class UnregisterResponse(BaseModel):
    """Outcome of unregistering one pattern per whitelist expression."""

    model_config = ConfigDict(extra="forbid")

    removed: bool
    unregistered: List[PatternInfo] = Field(default_factory=list)


def _trigger(request: Request) -> DirectoryTrigger:
    return request.app.state.trigger


def _pattern_info(pattern: PathPattern) -> PatternInfo:
    return PatternInfo(**pattern.to_dict())


@router.get("/status", response_model=TriggerStatus)
async def get_status(request: Request):
    """Current trigger state and counters."""
    return _trigger(request).status()


@router.get("/patterns", response_model=List[PatternInfo])
async def list_patterns(request: Request):
    """List registered patterns in registration order."""
    return [_pattern_info(p) for p in _trigger(request).registered_patterns()]


@router.post("/patterns", response_model=List[PatternInfo])
async def register_patterns(body: RegisterPatternsRequest, request: Request):
    """
    Register one pattern per whitelist expression.

    Re-registering an identical pattern is a no-op that still returns it.

    Raises:
        400: An expression is malformed, or the trigger is not initialized
    """
    trigger = _trigger(request)
    try:
        identities = trigger.register(body.whitelist, offset=body.offset, blacklist=body.blacklist)
    except (InvalidPatternError, TriggerStateError) as e:
        logger.warning(f"Pattern registration rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return sorted(
        (_pattern_info(p) for p in identities),
        key=lambda info: info.whitelist,
    )


@router.post("/patterns/unregister", response_model=UnregisterResponse)
async def unregister_pattern(body: UnregisterPatternRequest, request: Request):
    """
    Unregister one pattern per whitelist expression.

    Mirrors registration, so the body used to register removes every
    pattern it created. Unknown patterns are not an error; `removed` is
    false when nothing matched.

    Raises:
        400: An expression is malformed, or the trigger is not initialized
    """
    trigger = _trigger(request)
    if trigger.config is None:
        raise HTTPException(status_code=400, detail="Trigger is not initialized")

    try:
        identities = [
            PathPattern(
                job_id=trigger.config.job_id,
                whitelist=frozenset([expression]),
                blacklist=frozenset(body.blacklist),
            )
            for expression in sorted(set(body.whitelist))
        ]
    except InvalidPatternError as e:
        raise HTTPException(status_code=400, detail=str(e))

    unregistered = [_pattern_info(p) for p in identities if trigger.unregister(p)]
    return UnregisterResponse(removed=bool(unregistered), unregistered=unregistered)


@router.get("/jobs", response_model=List[JobDescriptor])
async def list_jobs(request: Request):
    """Fetched jobs in emission order (non-destructive)."""
    return _trigger(request).fetched_jobs().all()


@router.post("/jobs/drain", response_model=List[JobDescriptor])
async def drain_jobs(request: Request):
    """Return fetched jobs and remove them from the sink."""
    jobs = _trigger(request).fetched_jobs().drain()
    if jobs:
        logger.info(f"Drained {len(jobs)} fetched job(s)")
    return jobs
