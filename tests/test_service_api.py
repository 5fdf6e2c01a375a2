"""
Tests for the HTTP service (FastAPI TestClient, no network).
"""
from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from service_api.main import app

from conftest import make_line, make_lines


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _upload(lines):
    payload = ("\n".join(lines) + "\n").encode("utf-8")
    return {"file": ("dpwh_flood_control_projects.csv", io.BytesIO(payload), "text/csv")}


def _five_projects():
    return make_lines(*[
        make_line(project_id=f"P-{i}", contractor="Delta Builders",
                  approved_budget="2,000", contract_cost="1,000",
                  start_date="2022-01-01", completion_date="2022-01-11")
        for i in range(5)
    ] + [make_line(approved_budget="pending")])


class TestServiceApi:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_config_defaults(self, client, monkeypatch):
        monkeypatch.delenv("FLOOD_YEAR_FROM", raising=False)
        body = client.get("/config").json()
        assert body["year_from"] == 2021
        assert body["baseline_year"] == 2021

    def test_config_from_env(self, client, monkeypatch):
        monkeypatch.setenv("FLOOD_TOP_N", "3")
        assert client.get("/config").json()["contractor_report_size"] == 3

    def test_analyze_json(self, client):
        resp = client.post("/analyze", files=_upload(_five_projects()))
        assert resp.status_code == 200
        body = resp.json()
        assert body["summary"]["total_rows_read"] == 6
        assert body["summary"]["total_rejected"] == 1
        assert body["rejection_reasons"] == {"invalid_approved_budget": 1}
        [row] = body["contractor_ranking"]
        assert row["Contractor"] == "Delta Builders"
        assert row["Rank"] == 1
        assert len(body["regional_efficiency"]) == 1
        assert len(body["annual_trends"]) == 1

    def test_query_overrides(self, client):
        resp = client.post("/analyze", params={"min_projects": 6}, files=_upload(_five_projects()))
        assert resp.status_code == 200
        assert resp.json()["contractor_ranking"] == []

    def test_invalid_range_is_400(self, client):
        resp = client.post("/analyze", params={"year_from": 2023, "year_to": 2021},
                           files=_upload(_five_projects()))
        assert resp.status_code == 400

    def test_undecodable_upload_is_400(self, client):
        files = {"file": ("bad.csv", io.BytesIO(b"\xff\xfe\x00\x81"), "text/csv")}
        resp = client.post("/analyze", files=files)
        assert resp.status_code == 400

    def test_download_workbook(self, client, tmp_path):
        resp = client.post("/analyze_download", files=_upload(_five_projects()))
        assert resp.status_code == 200
        out = tmp_path / "dl.xlsx"
        out.write_bytes(resp.content)
        wb = load_workbook(out)
        assert "Contractor_Ranking" in wb.sheetnames
        assert "Summary" in wb.sheetnames
