"""Dashboard sessions with in-memory storage.

Each session owns a single DashboardState that is replaced wholesale on
every change. Ingestions and insight requests are tagged with generation
counters so that a result arriving after a newer request has started is
discarded rather than merged.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from turnout_vision.core.errors import (
    CSVParseError,
    InsightRequestError,
    RecordValueError,
    SchemaError,
    TurnoutVisionError,
)
from turnout_vision.core.types import ActiveFilterSet
from turnout_vision.filters.evaluator import validate_selection
from turnout_vision.ingest.pipeline import Dataset, load_dataset
from turnout_vision.insights.models import InsightState, InsightStatus
from turnout_vision.session.state import DashboardState, IngestionError, ResultSlot

logger = logging.getLogger(__name__)


def _describe_error(exc: TurnoutVisionError) -> IngestionError:
    if isinstance(exc, SchemaError):
        return IngestionError(kind="schema", message=str(exc), missing_columns=exc.missing)
    if isinstance(exc, RecordValueError):
        return IngestionError(
            kind="value",
            message=f"Error processing data: {exc}",
            precinct_id=exc.precinct_id,
            row_number=exc.row_number,
        )
    if isinstance(exc, CSVParseError):
        return IngestionError(kind="parse", message=str(exc))
    return IngestionError(kind="unknown", message=str(exc))


class DashboardSession:
    """One browser tab's worth of dashboard state."""

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc)
        self.last_active = self.created_at
        self._state = DashboardState()
        self._insight_counter = 0

    @property
    def state(self) -> DashboardState:
        return self._state

    def _replace(self, state: DashboardState) -> DashboardState:
        self._state = state
        self.last_active = datetime.now(timezone.utc)
        return state

    def _idle_insight(self) -> InsightState:
        # Bumping the counter invalidates any insight request still in flight.
        self._insight_counter += 1
        return InsightState(request_id=self._insight_counter)

    # -- ingestion -------------------------------------------------------------

    def begin_ingestion(self, filename: str | None = None) -> ResultSlot[Dataset]:
        """Start a new upload, clearing prior data and filters."""
        generation = self._state.generation + 1
        self._replace(
            DashboardState(
                generation=generation,
                filename=filename,
                loading=True,
                insight=self._idle_insight(),
            )
        )
        return ResultSlot(generation)

    def complete_ingestion(
        self, slot: ResultSlot[Dataset], csv_text: str
    ) -> DashboardState | None:
        """Load *csv_text* into the session if *slot* is still current.

        Returns the new state, or None when a newer ingestion has superseded
        this one. Ingestion errors are recorded on the state and re-raised.
        """
        if slot.generation != self._state.generation:
            logger.info(
                "Discarding superseded ingestion %d (current %d)",
                slot.generation, self._state.generation,
            )
            return None

        try:
            dataset = load_dataset(csv_text)
        except (CSVParseError, SchemaError, RecordValueError) as exc:
            logger.warning("Ingestion %d failed: %s", slot.generation, exc)
            self._replace(
                self._state.model_copy(
                    update={"loading": False, "error": _describe_error(exc)}
                )
            )
            raise

        slot.set(dataset)
        return self._replace(
            self._state.model_copy(
                update={
                    "csv_text": csv_text,
                    "headers": dataset.headers,
                    "records": dataset.records,
                    "catalog": dataset.catalog,
                    "active_filters": ActiveFilterSet(),
                    "loading": False,
                    "error": None,
                }
            )
        )

    def ingest(self, filename: str | None, csv_text: str) -> DashboardState:
        """Synchronous upload: begin and complete in one call."""
        slot = self.begin_ingestion(filename)
        state = self.complete_ingestion(slot, csv_text)
        if state is None:
            raise RuntimeError(f"Ingestion {slot.generation} was superseded while running")
        return state

    def reset(self) -> DashboardState:
        """Drop the dataset, filters, errors and insights."""
        return self._replace(
            DashboardState(
                generation=self._state.generation + 1,
                insight=self._idle_insight(),
            )
        )

    # -- filters ---------------------------------------------------------------

    def select_filter(self, column: str, value: str) -> DashboardState:
        """Set one filter selection.

        Raises:
            FilterSelectionError: If the catalog does not offer the selection.
        """
        validate_selection(self._state.catalog, column, value)
        return self._replace(
            self._state.model_copy(
                update={"active_filters": self._state.active_filters.with_selection(column, value)}
            )
        )

    def clear_filters(self) -> DashboardState:
        return self._replace(
            self._state.model_copy(
                update={"active_filters": self._state.active_filters.cleared()}
            )
        )

    # -- insights --------------------------------------------------------------

    def begin_insight(self) -> ResultSlot[str]:
        """Mark an insight request as in progress.

        The returned slot carries the CSV text to send.

        Raises:
            InsightRequestError: If no dataset has been uploaded.
        """
        if not self._state.csv_text:
            raise InsightRequestError("No data: upload a CSV file first")
        self._insight_counter += 1
        self._replace(
            self._state.model_copy(
                update={
                    "insight": InsightState(
                        status=InsightStatus.LOADING, request_id=self._insight_counter
                    )
                }
            )
        )
        return ResultSlot(self._insight_counter, source=self._state.csv_text)

    def _insight_is_current(self, slot: ResultSlot[str]) -> bool:
        if slot.generation != self._state.insight.request_id:
            logger.info(
                "Discarding superseded insight request %d (current %d)",
                slot.generation, self._state.insight.request_id,
            )
            return False
        return True

    def complete_insight(self, slot: ResultSlot[str], insights: str) -> DashboardState | None:
        slot.set(insights)
        if not self._insight_is_current(slot):
            return None
        return self._replace(
            self._state.model_copy(
                update={
                    "insight": InsightState(
                        status=InsightStatus.SUCCESS,
                        request_id=slot.generation,
                        insights=insights,
                    )
                }
            )
        )

    def fail_insight(self, slot: ResultSlot[str], message: str) -> DashboardState | None:
        if not self._insight_is_current(slot):
            return None
        return self._replace(
            self._state.model_copy(
                update={
                    "insight": InsightState(
                        status=InsightStatus.ERROR,
                        request_id=slot.generation,
                        error=message,
                    )
                }
            )
        )


class DashboardSessionManager:
    """In-memory session store, one entry per open dashboard."""

    def __init__(self) -> None:
        self._sessions: dict[str, DashboardSession] = {}

    def create_session(self) -> DashboardSession:
        session = DashboardSession()
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> DashboardSession | None:
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def list_active_sessions(self) -> list[DashboardSession]:
        """All sessions, most recently active first."""
        return sorted(
            self._sessions.values(),
            key=lambda s: s.last_active,
            reverse=True,
        )
