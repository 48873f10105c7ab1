"""
Background dispatcher for engine calls.

Callers submit a request and get a Future back; the engine runs on a worker
thread and replies with a Response carrying the same request id. Pending
futures are keyed by request id, never by message kind, so any number of
same-kind requests can be in flight at once and each resolves with its own
result.
"""

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from steadfast.config import SteadfastConfig
from steadfast import pipeline

logger = logging.getLogger(__name__)


class DispatchError(RuntimeError):
    """Raised through a request's future when the worker reports an error."""


@dataclass(frozen=True)
class Request:
    request_id: str
    kind: str
    events: Any
    now: Any = None


@dataclass(frozen=True)
class Response:
    request_id: str
    kind: str
    payload: Any = None
    error: Optional[str] = None


def _handlers() -> Dict[str, Callable]:
    return {
        "predict_risk": pipeline.predict_risk,
        "daily_risk_assessment": pipeline.get_daily_risk_assessment,
        "detect_patterns": pipeline.detect_patterns,
        "analyze_correlations": lambda events, now, cfg: pipeline.analyze_correlations(events, cfg),
        "generate_predictions": pipeline.generate_predictions,
    }


class AnalyticsDispatcher:
    """
    Runs engine requests off the caller's thread.

    Usage:
        with AnalyticsDispatcher(max_workers=2) as dispatcher:
            future = dispatcher.submit("predict_risk", events, now="2026-01-15")
            prediction = future.result(timeout=5)

    Retries, cancellation and timeouts stay with the caller, via the
    returned Future.
    """

    KINDS = tuple(_handlers())

    def __init__(self, cfg: Optional[SteadfastConfig] = None, max_workers: int = 1):
        self.cfg = cfg or SteadfastConfig()
        self._handlers = _handlers()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="steadfast-worker"
        )
        self._pending: Dict[str, Future] = {}
        self._lock = threading.Lock()
        self._closed = False
        logger.info("Analytics dispatcher started with %d worker(s)", max_workers)

    # -- Worker side ----------------------------------------------------------

    def _handle(self, request: Request) -> Response:
        handler = self._handlers.get(request.kind)
        if handler is None:
            return Response(request.request_id, request.kind,
                            error=f"Unknown request kind: {request.kind}")
        try:
            payload = handler(request.events, request.now, self.cfg)
        except Exception as e:
            logger.exception("Request %s (%s) failed", request.request_id, request.kind)
            return Response(request.request_id, request.kind, error=f"{type(e).__name__}: {e}")
        return Response(request.request_id, request.kind, payload=payload)

    def _deliver(self, response: Response) -> None:
        with self._lock:
            future = self._pending.pop(response.request_id, None)
        if future is None:
            logger.warning("Dropping response for unknown request %s", response.request_id)
            return
        if response.error is not None:
            logger.warning("Request %s (%s) errored: %s",
                           response.request_id, response.kind, response.error)
            future.set_exception(DispatchError(response.error))
        else:
            future.set_result(response.payload)

    def _run(self, request: Request) -> None:
        self._deliver(self._handle(request))

    # -- Caller side ----------------------------------------------------------

    def submit(self, kind: str, events: Any, now: Any = None) -> Future:
        """Queue one engine call; the future resolves with its result."""
        future: Future = Future()
        request = Request(request_id=uuid.uuid4().hex, kind=kind, events=events, now=now)
        logger.debug("Submitting %s as %s", kind, request.request_id)
        with self._lock:
            if self._closed:
                raise DispatchError("Dispatcher is shut down")
            self._pending[request.request_id] = future
            try:
                self._executor.submit(self._run, request)
            except RuntimeError as e:
                # Executor already stopped; the request never ran
                del self._pending[request.request_id]
                raise DispatchError(f"Dispatcher is shut down: {e}") from e
        return future

    def predict_risk(self, events: Any, now: Any = None) -> Future:
        return self.submit("predict_risk", events, now)

    def daily_risk_assessment(self, events: Any, now: Any = None) -> Future:
        return self.submit("daily_risk_assessment", events, now)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
        if wait:
            with self._lock:
                leftover = list(self._pending.values())
                self._pending.clear()
            for future in leftover:
                future.set_exception(DispatchError("Dispatcher shut down before reply"))
        logger.info("Analytics dispatcher stopped")

    def __enter__(self) -> "AnalyticsDispatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
