"""
Acquisition API — Start, filter and inspect per-entity loading sessions.

Routes:
  POST /acquisition/{entity}/start        → new session (metadata + strategy)
  POST /acquisition/{entity}/load-all     → reload the whole dataset
  POST /acquisition/{entity}/filter       → load a date range or a preset
  GET  /acquisition/{entity}              → state, progress, counts, bounds
  GET  /acquisition/{entity}/records      → loaded records (COMPLETE only)
  GET  /acquisition/{entity}/presets      → relative date presets
  GET  /acquisition/{entity}/dates/{f}   → distinct date values in a range

Loads run in the background; clients poll the session endpoint.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from pivot_report.core.exceptions import InvalidFilterPreset
from pivot_report.services.orchestrator import AcquisitionSession, session_registry
from pivot_report.services.orchestrator.session import SessionState

router = APIRouter(prefix="/acquisition", tags=["acquisition"])


# ── Pydantic request models ──────────────────────────────────────

class FilterRequest(BaseModel):
    """
    Request body for POST /acquisition/{entity}/filter.

    Either an explicit ``start``/``end`` pair or a relative ``preset``.
    """
    start: Optional[str] = Field(None, description="Lower bound, YYYY-MM-DD.")
    end: Optional[str] = Field(None, description="Upper bound, YYYY-MM-DD.")
    preset: Optional[str] = Field(
        None, description="Relative filter id, e.g. 'this.month'. '' means Any.",
    )


# ── Helpers ──────────────────────────────────────────────────────

def _get_session(entity: str) -> AcquisitionSession:
    session = session_registry.get(entity)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No session for entity '{entity}'")
    return session


def _get_started_session(entity: str) -> AcquisitionSession:
    session = _get_session(entity)
    if session.metadata is None:
        raise HTTPException(
            status_code=409,
            detail=f"Session for '{entity}' is still in state '{session.state.value}'",
        )
    return session


def _describe(session: AcquisitionSession) -> dict:
    result = session.snapshot()
    to_dict = getattr(session.listener, "to_dict", None)
    if to_dict is not None:
        result.update(to_dict())
    return result


# ── Endpoints ────────────────────────────────────────────────────

@router.post("/{entity}/start", status_code=202)
async def start_session(entity: str):
    """Replace any session for *entity* and start it in the background."""
    session = session_registry.create(entity)
    session_registry.run(session, session.start())
    return _describe(session)


@router.post("/{entity}/load-all", status_code=202)
async def load_all(entity: str):
    """Discard the current data and load every record of *entity*."""
    session = _get_started_session(entity)
    session_registry.run(session, session.load_all())
    return _describe(session)


@router.post("/{entity}/filter", status_code=202)
async def apply_filter(entity: str, body: FilterRequest):
    """
    Load the records inside a date range.

    A ``preset`` is resolved before anything is scheduled so an unknown
    id is reported synchronously.
    """
    session = _get_started_session(entity)

    start, end = body.start, body.end
    if body.preset is not None:
        try:
            bounds = session.resolve_preset(body.preset)
        except InvalidFilterPreset as exc:
            raise HTTPException(status_code=400, detail=exc.to_dict())
        start, end = bounds.start, bounds.end

    session_registry.run(session, session.apply_filter(start, end))
    result = _describe(session)
    result["requested"] = {"start": start, "end": end}
    return result


@router.get("/{entity}")
async def get_session(entity: str):
    return _describe(_get_session(entity))


@router.get("/{entity}/records")
async def get_records(
    entity: str,
    limit: Optional[int] = Query(None, ge=0, description="Max records to return."),
    offset: int = Query(0, ge=0),
):
    """Records of a COMPLETE session, with the custom filter applied."""
    session = _get_session(entity)
    dataset = session.dataset
    if dataset is None:
        raise HTTPException(
            status_code=409,
            detail=f"Records not available in state '{session.state.value}'",
        )

    records = dataset.filtered_records()
    page = records[offset:] if limit is None else records[offset:offset + limit]
    return {
        "header": dataset.header,
        "total": len(records),
        "offset": offset,
        "records": page,
    }


@router.get("/{entity}/presets")
async def list_presets(entity: str):
    session = _get_session(entity)
    return {"entity": entity, "presets": session.preset_options()}


@router.get("/{entity}/dates/{field_name}")
async def matching_dates(
    entity: str,
    field_name: str,
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
):
    """Distinct values of a date field that fall inside ``[start, end]``."""
    session = _get_session(entity)
    if session.state is not SessionState.COMPLETE:
        raise HTTPException(
            status_code=409,
            detail=f"Records not available in state '{session.state.value}'",
        )
    options = session.matching_date_values(field_name, start, end)
    return {"field": field_name, "values": [o.to_dict() for o in options]}
