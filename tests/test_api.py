from datetime import datetime
from unittest.mock import MagicMock

import pytest

from plantdash.app import create_app
from plantdash.config import TestingConfig
from plantdash.services.labview import UpstreamError


def test_health_needs_no_key(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_index_lists_endpoints(client):
    body = client.get("/").get_json()

    assert body["endpoints"]["dashboard"]["metadata"] == "/api/meta"


class TestAuth:
    def test_missing_key_is_401(self, client):
        response = client.get("/api/meta")

        assert response.status_code == 401
        assert response.get_json()["error"] == "Authentication required"

    def test_wrong_key_is_403(self, client):
        response = client.get("/api/meta", headers={"X-API-Key": "nope"})

        assert response.status_code == 403
        assert response.get_json()["success"] is False

    def test_auth_can_be_disabled(self, now):
        app = create_app({"AUTH_DISABLED": True, "USE_MOCK_DATA": True}, clock=lambda: now)

        assert app.test_client().get("/api/meta").status_code == 200


def test_meta(client, auth_headers, now):
    body = client.get("/api/meta", headers=auth_headers).get_json()

    assert body["success"] is True
    assert set(body["data"]) == {"plants", "lines", "stations_meta", "shifts"}
    assert body["timestamp"] == now.isoformat()


class TestLineStatus:
    def test_defaults(self, client, auth_headers):
        body = client.get("/api/line_status", headers=auth_headers).get_json()

        assert body["filters"] == {
            "plant": "pune",
            "line": "fcpv",
            "station": "all",
            "shift": "all",
            "dateRange": "today",
        }
        assert body["data"]["meta"]["resolution"] == "raw"
        assert set(body["data"]) == {"line_kpi", "charts", "downtime", "stations", "spc", "meta"}
        assert set(body["data"]["spc"]["charts"]) == {"control_points", "histogram", "defects"}

    def test_last7_is_shift_resolution_with_three_points_per_day(self, client, auth_headers, now):
        body = client.get("/api/line_status?dateRange=last7", headers=auth_headers).get_json()
        days_in_range = (now.date() - datetime(2026, 3, 11).date()).days + 1

        assert body["data"]["meta"]["resolution"] == "shift"
        assert len(body["data"]["charts"]["velocity"]) == 3 * days_in_range

    @pytest.mark.parametrize(
        "start, end, resolution",
        [
            ("2026-03-01", "2026-03-01", "raw"),
            ("2026-03-01", "2026-03-05", "shift"),
            ("2026-03-01", "2026-03-15", "day"),
            ("2026-01-01", "2026-02-14", "month"),
        ],
    )
    def test_custom_ranges(self, client, auth_headers, start, end, resolution):
        response = client.get(
            "/api/line_status",
            query_string={"dateRange": "custom", "startDate": start, "endDate": end},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["data"]["meta"]["resolution"] == resolution
        assert body["filters"]["startDate"] == start

    def test_repeated_polls_are_identical(self, client, auth_headers):
        first = client.get("/api/line_status?dateRange=today", headers=auth_headers).get_json()
        second = client.get("/api/line_status?dateRange=today", headers=auth_headers).get_json()

        assert first["data"] == second["data"]

    def test_script_in_plant_is_rejected(self, client, auth_headers):
        response = client.get(
            "/api/line_status", query_string={"plant": "<script>"}, headers=auth_headers
        )

        assert response.status_code == 400
        body = response.get_json()
        assert body["success"] is False
        assert "plant" in [d["field"] for d in body["details"]]

    def test_overlong_value_is_rejected(self, client, auth_headers):
        response = client.get(
            "/api/line_status", query_string={"shift": "A" * 51}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.get_json()["details"][0]["field"] == "shift"

    def test_auth_runs_before_validation(self, client):
        response = client.get("/api/line_status", query_string={"plant": "<script>"})

        assert response.status_code == 401

    def test_shift_filter_narrows_velocity(self, client, auth_headers):
        body = client.get(
            "/api/line_status?dateRange=last7&shift=C", headers=auth_headers
        ).get_json()

        labels = [p["time"] for p in body["data"]["charts"]["velocity"]]
        assert len(labels) == 8
        assert all(label.endswith("- C") for label in labels)


def test_station_status(client, auth_headers):
    body = client.get(
        "/api/station_status?id=op20&dateRange=last30&shift=all", headers=auth_headers
    ).get_json()

    assert body["station"] == "op20"
    assert body["filters"] == {"dateRange": "last30", "shift": "all"}
    assert body["data"]["meta"]["resolution"] == "day"
    assert len(body["data"]["station_details"]["logs"]) == 50


def test_station_status_defaults_to_op10(client, auth_headers):
    assert client.get("/api/station_status", headers=auth_headers).get_json()["station"] == "op10"


def test_export_in_mock_mode_is_a_placeholder(client, auth_headers):
    response = client.get("/api/export?reportType=spc", headers=auth_headers)

    assert response.status_code == 501
    assert response.get_json()["success"] is False


def test_export_rejects_unknown_report_type(client, auth_headers):
    response = client.get("/api/export?reportType=pdf", headers=auth_headers)

    assert response.status_code == 400


def test_unknown_route_is_404(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "NOT_FOUND"


class TestProxyMode:
    @pytest.fixture
    def proxy_app(self, now):
        class ProxyConfig(TestingConfig):
            USE_MOCK_DATA = False

        app = create_app(ProxyConfig, clock=lambda: now)
        app.extensions["labview"] = MagicMock()
        return app

    def test_line_status_is_proxied(self, proxy_app, auth_headers):
        labview = proxy_app.extensions["labview"]
        labview.get_line_status.return_value = {"line_kpi": {"oee": {"value": 81.0}}}

        body = proxy_app.test_client().get(
            "/api/line_status?plant=chennai&line=compressor", headers=auth_headers
        ).get_json()

        assert body["data"] == {"line_kpi": {"oee": {"value": 81.0}}}
        sent = labview.get_line_status.call_args[0][0]
        assert sent["plant"] == "chennai"
        assert sent["line"] == "compressor"

    def test_upstream_failure_is_500_with_message(self, proxy_app, auth_headers):
        labview = proxy_app.extensions["labview"]
        labview.get_metadata.side_effect = UpstreamError(
            "Failed to fetch metadata from LabVIEW: Request timed out after 5000ms"
        )

        response = proxy_app.test_client().get("/api/meta", headers=auth_headers)

        assert response.status_code == 500
        body = response.get_json()
        assert body["success"] is False
        assert "timed out" in body["error"]["message"]

    def test_export_streams_spreadsheet(self, proxy_app, auth_headers):
        upstream = MagicMock()
        upstream.headers = {"Content-Type": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"}
        upstream.iter_content.return_value = iter([b"PK\x03\x04", b"rest"])
        proxy_app.extensions["labview"].export_report.return_value = upstream

        response = proxy_app.test_client().get(
            "/api/export?reportType=table&dateRange=last7", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.data == b"PK\x03\x04rest"
        assert "table_report_20260318_143712.xlsx" in response.headers["Content-Disposition"]
        filters, report_type = proxy_app.extensions["labview"].export_report.call_args[0]
        assert report_type == "table"
        assert filters["dateRange"] == "last7"


@pytest.mark.parametrize(
    "start, resolution",
    [("9999-12-31", "raw"), ("9999-12-28", "shift"), ("9999-12-10", "day"), ("9999-10-01", "month")],
)
def test_custom_range_at_the_calendar_limit(client, auth_headers, start, resolution):
    response = client.get(
        "/api/line_status",
        query_string={"dateRange": "custom", "startDate": start, "endDate": "9999-12-31"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["data"]["meta"]["resolution"] == resolution
    assert body["data"]["charts"]["velocity"]


def test_non_json_upstream_answer_is_reported(now, auth_headers):
    class ProxyConfig(TestingConfig):
        USE_MOCK_DATA = False

    app = create_app(ProxyConfig, clock=lambda: now)
    session = MagicMock()
    session.get.return_value = MagicMock(ok=True, status_code=200, json=MagicMock(side_effect=ValueError("no json")))
    app.extensions["labview"].session = session

    response = app.test_client().get("/api/meta", headers=auth_headers)

    assert response.status_code == 500
    assert "Invalid JSON" in response.get_json()["error"]["message"]


def test_filters_keep_their_field_order(client, auth_headers):
    body = client.get("/api/line_status", headers=auth_headers).get_json()

    assert list(body["filters"]) == ["plant", "line", "station", "shift", "dateRange"]


def test_uncaught_error_details_only_in_debug(now, auth_headers):
    app = create_app(TestingConfig, clock=lambda: now)
    app.extensions["generator"] = MagicMock()
    app.extensions["generator"].metadata.side_effect = RuntimeError("catalogue missing")
    client = app.test_client()

    body = client.get("/api/meta", headers=auth_headers).get_json()
    assert body["error"]["message"] == "An unexpected error occurred"
    assert "details" not in body["error"]

    app.debug = True
    body = client.get("/api/meta", headers=auth_headers).get_json()
    assert body["error"]["details"] == "catalogue missing"
