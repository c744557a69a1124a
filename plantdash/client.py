"""HTTP client and polling loop for consumers of the dashboard API."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from .middleware.auth import API_KEY_HEADER

logger = logging.getLogger("plantdash.client")

# Answers retried by ApiClient; 4xx is returned at once
RETRY_STATUSES = (500, 502, 503, 504)


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ApiClient:
    """Thin wrapper over the four dashboard endpoints.

    GETs are retried up to ``retries`` times on connection errors and 5xx
    answers with exponential backoff scaled by ``backoff_factor``. A 404 or
    other 4xx is returned at once.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        api_key: Optional[str] = None,
        timeout_ms: int = 10000,
        session: Optional[requests.Session] = None,
        retries: int = 3,
        backoff_factor: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_ms / 1000
        self.session = session or requests.Session()

        adapter = HTTPAdapter(
            max_retries=Retry(
                total=retries,
                backoff_factor=backoff_factor,
                status_forcelist=RETRY_STATUSES,
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        if api_key:
            self.session.headers[API_KEY_HEADER] = api_key

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        clean = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        try:
            resp = self.session.get(f"{self.base_url}{path}", params=clean, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"Request to {path} failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if not resp.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get("message") or payload.get("error")
                if isinstance(message, dict):
                    message = message.get("message")
            raise ApiError(message or f"HTTP {resp.status_code}", resp.status_code, payload)
        return payload

    def metadata(self) -> Dict[str, Any]:
        return self._get("/api/meta")

    def line_status(self, **filters: Any) -> Dict[str, Any]:
        return self._get("/api/line_status", filters)

    def station_status(self, station_id: str, **filters: Any) -> Dict[str, Any]:
        return self._get("/api/station_status", dict(filters, id=station_id))

    def health(self) -> Dict[str, Any]:
        return self._get("/health")


class Poller:
    """Call ``fetch`` every ``interval`` seconds on a background thread.

    At most one fetch runs at a time: a tick or ``refetch()`` that fires while
    the previous fetch is still in flight is skipped rather than queued, so
    responses are never applied out of order. A fetch that completes after
    ``stop()`` is discarded without calling either callback.
    """

    def __init__(
        self,
        fetch: Callable[[], Any],
        interval: float = 5.0,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.fetch = fetch
        self.interval = interval
        self.on_success = on_success
        self.on_error = on_error

        self.data: Any = None
        self.error: Optional[Exception] = None
        self.skipped = 0

        self._busy = threading.Lock()
        self._paused = threading.Event()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_paused(self) -> bool:
        return self._paused.is_set()

    def tick(self) -> bool:
        """Run one fetch unless paused or busy; return whether it ran."""
        if self._paused.is_set() or self._stopped.is_set():
            return False
        if not self._busy.acquire(blocking=False):
            self.skipped += 1
            logger.debug("Previous fetch still in flight; skipping tick")
            return False
        try:
            result = self.fetch()
            if self._stopped.is_set():
                logger.debug("Poller stopped during fetch; dropping result")
                return True
        except Exception as exc:
            if self._stopped.is_set():
                logger.debug("Poller stopped during fetch; dropping error: %s", exc)
                return True
            self.error = exc
            logger.warning("Poll failed, retrying next tick: %s", exc)
            if self.on_error:
                self.on_error(exc)
        else:
            self.data = result
            self.error = None
            if self.on_success:
                self.on_success(result)
        finally:
            self._busy.release()
        return True

    def refetch(self) -> bool:
        return self.tick()

    def _run(self) -> None:
        while not self._stopped.is_set():
            self.tick()
            self._stopped.wait(self.interval)

    def start(self) -> "Poller":
        if self._thread is None or not self._thread.is_alive():
            self._stopped.clear()
            self._thread = threading.Thread(target=self._run, name="plantdash-poller", daemon=True)
            self._thread.start()
        return self

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        self._paused.clear()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None


__all__ = ["ApiClient", "ApiError", "Poller"]
