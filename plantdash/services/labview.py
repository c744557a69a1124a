"""LabVIEW web service client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

logger = logging.getLogger("plantdash.labview")

SPREADSHEET_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class UpstreamError(Exception):
    """LabVIEW was unreachable, timed out, or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LabviewService:
    """Pass-through HTTP client; one request per call, no retries."""

    def __init__(
        self,
        base_url: str,
        timeout_ms: int = 5000,
        export_timeout_ms: int = 30000,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_ms / 1000
        self.export_timeout = export_timeout_ms / 1000
        self.session = session or requests.Session()
        logger.info("LabviewService initialized with URL: %s", self.base_url)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "LabviewService":
        return cls(
            config.get("LABVIEW_API_URL", "http://localhost:8080"),
            timeout_ms=int(config.get("LABVIEW_API_TIMEOUT", 5000)),
            export_timeout_ms=int(config.get("LABVIEW_EXPORT_TIMEOUT", 30000)),
        )

    @staticmethod
    def _clean(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return {k: v for k, v in (params or {}).items() if v is not None}

    def _request(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug("Calling %s params=%s", url, params)
        try:
            resp = self.session.get(
                url,
                params=self._clean(params),
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise UpstreamError(f"Request timed out after {int(self.timeout * 1000)}ms") from exc
        except requests.ConnectionError as exc:
            raise UpstreamError(f"Connection failed: {exc}") from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"Request failed: {exc}") from exc

        if not resp.ok:
            try:
                payload = resp.json()
            except ValueError:
                payload = None
            message = payload.get("message") if isinstance(payload, dict) else None
            raise UpstreamError(message or f"HTTP error! status: {resp.status_code}", resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(f"Invalid JSON in response: {exc}", resp.status_code) from exc

    def _call(self, endpoint: str, what: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        try:
            return self._request(endpoint, params)
        except UpstreamError as exc:
            logger.error("LabVIEW %s failed: %s (params=%s)", endpoint, exc, params)
            raise UpstreamError(f"Failed to fetch {what} from LabVIEW: {exc}", exc.status_code) from exc

    def get_line_status(self, filters: Mapping[str, Any]) -> Any:
        return self._call("/api/line_status", "line status", filters)

    def get_station_details(self, station_id: str, filters: Optional[Mapping[str, Any]] = None) -> Any:
        params = dict(filters or {})
        params["id"] = station_id
        return self._call("/api/station_status", "station details", params)

    def get_metadata(self) -> Any:
        return self._call("/api/meta", "metadata")

    def export_report(self, filters: Mapping[str, Any], report_type: str) -> requests.Response:
        """Ask LabVIEW for a spreadsheet; the caller streams ``iter_content``."""
        params = self._clean(filters)
        params["reportType"] = report_type
        url = f"{self.base_url}/api/export"
        logger.info("Export request: %s params=%s", url, params)
        try:
            resp = self.session.get(
                url,
                params=params,
                headers={"Accept": SPREADSHEET_MIMETYPE},
                timeout=self.export_timeout,
                stream=True,
            )
        except requests.Timeout as exc:
            raise UpstreamError(f"Export request timed out after {int(self.export_timeout)}s") from exc
        except requests.RequestException as exc:
            logger.error("LabVIEW export failed: %s (params=%s)", exc, params)
            raise UpstreamError(f"Failed to export report from LabVIEW: {exc}") from exc

        if not resp.ok:
            text = resp.text or "Unknown error"
            resp.close()
            logger.error("LabVIEW export returned %s (params=%s)", resp.status_code, params)
            raise UpstreamError(
                f"Failed to export report from LabVIEW: Export failed with status {resp.status_code}: {text}",
                resp.status_code,
            )
        return resp


__all__ = ["LabviewService", "SPREADSHEET_MIMETYPE", "UpstreamError"]
