"""Dashboard session state tagged with a query sequence number.

Each query gets a token from :meth:`DashboardSession.begin`. Results arriving
with an older token belong to a superseded query and are dropped, so a slow
first query can never overwrite the output of a faster second one.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import structlog

from .charts import build_dashboard, build_kpis
from .config import AppConfig
from .errors import InsightsError, InvalidInputError
from .github_api import GitHubSession
from .models import Kpi, QueryResult, Reference
from .normalizer import normalize
from .orchestrator import run_query

log = structlog.get_logger("portfolio_insights.session")

IDLE = "idle"
LOADING = "loading"
READY = "ready"
ERROR = "error"


@dataclass(frozen=True, slots=True)
class SessionState:
    sequence: int = 0
    status: str = IDLE
    reference: Optional[Reference] = None
    result: Optional[QueryResult] = None
    kpis: List[Kpi] = field(default_factory=list)
    dashboard: Optional[Dict[str, Any]] = None
    error: str = ""
    failure: Optional[Exception] = None

    @property
    def loading(self) -> bool:
        return self.status == LOADING


QueryRunner = Callable[[Reference], QueryResult]


class DashboardSession:
    def __init__(self, runner: QueryRunner, window_days: int = 90) -> None:
        self._runner = runner
        self._window_days = window_days
        self._lock = threading.Lock()
        self._state = SessionState()

    @classmethod
    def from_config(cls, config: AppConfig) -> "DashboardSession":
        def runner(ref: Reference) -> QueryResult:
            with GitHubSession.create(config.github) as github:
                return run_query(ref, github, config.query)

        return cls(runner, window_days=config.query.commit_window_days)

    @property
    def state(self) -> SessionState:
        return self._state

    def begin(self, reference: Optional[Reference] = None) -> int:
        """Start a new query: bump the sequence and clear everything shown."""
        with self._lock:
            sequence = self._state.sequence + 1
            self._state = SessionState(sequence=sequence, status=LOADING, reference=reference)
            return sequence

    def _settle(self, outcome: SessionState) -> bool:
        with self._lock:
            if outcome.sequence != self._state.sequence:
                log.info("session.stale_result", token=outcome.sequence, current=self._state.sequence)
                return False
            self._state = outcome
            return True

    def _ready(self, token: int, reference: Optional[Reference], result: QueryResult) -> SessionState:
        return SessionState(
            sequence=token,
            status=READY,
            reference=reference,
            result=result,
            kpis=build_kpis(result.view),
            dashboard=build_dashboard(result, self._window_days),
        )

    def complete(self, token: int, result: QueryResult, reference: Optional[Reference] = None) -> bool:
        return self._settle(self._ready(token, reference or self._state.reference, result))

    def fail(self, token: int, message: str, reference: Optional[Reference] = None) -> bool:
        outcome = SessionState(
            sequence=token,
            status=ERROR,
            reference=reference or self._state.reference,
            error=message or "Load failed",
        )
        return self._settle(outcome)

    def run(self, text: Optional[str]) -> SessionState:
        """Normalize ``text``, run the query and return the state it produced.

        The returned state belongs to this query even when a newer query has
        already replaced the session's current state.
        """
        reference = normalize(text)
        token = self.begin(reference)
        if reference is None:
            failure = InvalidInputError()
            outcome = SessionState(sequence=token, status=ERROR, error=str(failure), failure=failure)
            self._settle(outcome)
            return outcome

        try:
            outcome = self._ready(token, reference, self._runner(reference))
        except InsightsError as error:
            log.warning("query.failed", target=reference.slug, error=str(error))
            outcome = SessionState(
                sequence=token,
                status=ERROR,
                reference=reference,
                error=str(error) or "Load failed",
                failure=error,
            )
        except Exception as error:
            log.exception("query.crashed", target=reference.slug)
            outcome = SessionState(
                sequence=token,
                status=ERROR,
                reference=reference,
                error="Load failed",
                failure=error,
            )
        self._settle(outcome)
        return outcome
