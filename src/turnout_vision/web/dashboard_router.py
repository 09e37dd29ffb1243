"""FastAPI router for dashboard sessions: upload, filters, views, insights."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from turnout_vision.core.errors import (
    CSVParseError,
    FilterSelectionError,
    InsightRequestError,
    RecordValueError,
    SchemaError,
)
from turnout_vision.session.manager import DashboardSession
from turnout_vision.views.choropleth import build_map_layer, find_precinct, precinct_details
from turnout_vision.views.extremes import turnout_extremes
from turnout_vision.views.histogram import turnout_histogram

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions")


# --- Request/Response models ---


class DatasetUpload(BaseModel):
    """Request body for uploading a CSV file's contents."""

    filename: str
    csv_text: str


class FilterSelection(BaseModel):
    value: str


class SessionSummary(BaseModel):
    """Session state returned by the API (records excluded)."""

    session_id: str
    filename: str | None
    record_count: int
    filtered_count: int
    catalog: dict[str, list[str]]
    active_filters: dict[str, str]
    loading: bool
    error: dict[str, Any] | None
    insight: dict[str, Any]


# --- Helpers ---


def _get_session(request: Request, session_id: str) -> DashboardSession:
    session = request.app.state.session_manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return session


def _summary(session: DashboardSession) -> SessionSummary:
    state = session.state
    return SessionSummary(
        session_id=session.session_id,
        filename=state.filename,
        record_count=len(state.records),
        filtered_count=len(state.filtered_records()),
        catalog=state.catalog,
        active_filters=dict(state.active_filters.selections),
        loading=state.loading,
        error=state.error.model_dump() if state.error else None,
        insight=state.insight.model_dump(mode="json"),
    )


# --- Routes ---


@router.post("", response_model=SessionSummary)
async def create_session(request: Request) -> SessionSummary:
    """Open a new, empty dashboard session."""
    session = request.app.state.session_manager.create_session()
    return _summary(session)


@router.get("/{session_id}", response_model=SessionSummary)
async def get_session(session_id: str, request: Request) -> SessionSummary:
    return _summary(_get_session(request, session_id))


@router.delete("/{session_id}")
async def delete_session(session_id: str, request: Request) -> dict[str, Any]:
    if not request.app.state.session_manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return {"deleted": session_id}


@router.post("/{session_id}/dataset", response_model=SessionSummary)
async def upload_dataset(
    session_id: str, body: DatasetUpload, request: Request
) -> SessionSummary:
    """Replace the session's dataset with a newly uploaded CSV."""
    session = _get_session(request, session_id)
    settings = request.app.state.settings

    if not body.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=415, detail="Please upload a valid CSV file.")
    if len(body.csv_text.encode("utf-8")) > settings.dashboard.max_upload_bytes:
        raise HTTPException(status_code=413, detail="CSV file is too large.")

    try:
        session.ingest(body.filename, body.csv_text)
    except (CSVParseError, SchemaError, RecordValueError):
        error = session.state.error
        raise HTTPException(
            status_code=422,
            detail=error.model_dump() if error else "Failed to process CSV",
        )
    return _summary(session)


@router.delete("/{session_id}/dataset", response_model=SessionSummary)
async def reset_dataset(session_id: str, request: Request) -> SessionSummary:
    session = _get_session(request, session_id)
    session.reset()
    return _summary(session)


@router.put("/{session_id}/filters/{column}", response_model=SessionSummary)
async def select_filter(
    session_id: str, column: str, body: FilterSelection, request: Request
) -> SessionSummary:
    session = _get_session(request, session_id)
    try:
        session.select_filter(column, body.value)
    except FilterSelectionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _summary(session)


@router.delete("/{session_id}/filters", response_model=SessionSummary)
async def clear_filters(session_id: str, request: Request) -> SessionSummary:
    session = _get_session(request, session_id)
    session.clear_filters()
    return _summary(session)


@router.get("/{session_id}/records")
async def list_records(session_id: str, request: Request) -> list[dict[str, Any]]:
    """Filtered records in upload order."""
    session = _get_session(request, session_id)
    return [r.model_dump(mode="json") for r in session.state.filtered_records()]


@router.get("/{session_id}/map")
async def get_map_layer(session_id: str, request: Request) -> dict[str, Any]:
    session = _get_session(request, session_id)
    return build_map_layer(session.state.filtered_records()).model_dump(mode="json")


@router.get("/{session_id}/histogram")
async def get_histogram(session_id: str, request: Request) -> list[dict[str, Any]]:
    session = _get_session(request, session_id)
    bins = turnout_histogram(
        session.state.filtered_records(),
        bin_count=request.app.state.settings.dashboard.histogram_bins,
    )
    return [b.model_dump() for b in bins]


@router.get("/{session_id}/extremes")
async def get_extremes(session_id: str, request: Request) -> list[dict[str, Any]]:
    session = _get_session(request, session_id)
    entries = turnout_extremes(
        session.state.filtered_records(),
        limit=request.app.state.settings.dashboard.extremes_limit,
    )
    return [e.model_dump() for e in entries]


@router.get("/{session_id}/precincts/{precinct_id}")
async def get_precinct(
    session_id: str, precinct_id: str, request: Request
) -> dict[str, Any]:
    """Hover details for a precinct in the current filtered view."""
    session = _get_session(request, session_id)
    record = find_precinct(session.state.filtered_records(), precinct_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Precinct {precinct_id!r} not found")
    return precinct_details(record).model_dump(mode="json")


@router.post("/{session_id}/insights")
async def generate_insights(session_id: str, request: Request) -> dict[str, Any]:
    """Ask the LLM for a prose analysis of the uploaded CSV."""
    session = _get_session(request, session_id)
    requester = request.app.state.insight_requester

    try:
        slot = session.begin_insight()
    except InsightRequestError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    try:
        text = await requester.request(slot.source)
    except InsightRequestError as exc:
        session.fail_insight(slot, str(exc))
        raise HTTPException(status_code=502, detail=str(exc))
    except (Exception, asyncio.CancelledError) as exc:
        # A current request never stays at loading.
        logger.error("Unexpected insight failure in session %s: %r", session_id, exc)
        session.fail_insight(slot, f"Insight generation failed: {exc!r}")
        raise

    if session.complete_insight(slot, text) is None:
        raise HTTPException(
            status_code=409, detail="Insight request was superseded by a newer upload"
        )
    return session.state.insight.model_dump(mode="json")


@router.get("/{session_id}/insights")
async def get_insights(session_id: str, request: Request) -> dict[str, Any]:
    session = _get_session(request, session_id)
    return session.state.insight.model_dump(mode="json")
