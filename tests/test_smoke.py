from datetime import datetime

from fastapi.testclient import TestClient
from openpyxl import Workbook

from app.config import Settings, get_settings
from app.main import app

client = TestClient(app)

HEADER = "Month,Customer,Rep,Setup Fee,Subscription Amount,Billing Cycle\n"


def _use_source(path):
    app.dependency_overrides[get_settings] = lambda: Settings(source_path=path)


def teardown_function():
    app.dependency_overrides.clear()


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_deals_from_csv(tmp_path):
    src = tmp_path / "deals.csv"
    src.write_text(
        HEADER
        + "July 2025,Acme,Mata,100,500,6 month\n"
        + "July 2025,Other,Smith,0,900,monthly\n"
        + "August 2025,Globex,Mata,,250,2 Year\n",
        encoding="utf-8",
    )
    _use_source(src)

    r = client.get("/deals")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/json")

    body = r.json()
    assert body["success"] is True
    assert body["timestamp"].endswith("Z")
    assert body["data"] == [
        {"id": 1, "name": "Acme", "close": "2025-07-01", "subscription": 500,
         "setup": 100, "cycle": "six-month", "churnDate": None},
        {"id": 2, "name": "Globex", "close": "2025-08-01", "subscription": 250,
         "setup": 0, "cycle": "two-year", "churnDate": None},
    ]


def test_deals_from_workbook_prefers_close_date(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.append(["Month", "Customer", "Rep", "Setup Fee", "Subscription Amount", "Billing Cycle", "Close Date"])
    ws.append(["July 2025", "Acme", "Mata", 100, 500, "Yearly", datetime(2025, 7, 15)])
    src = tmp_path / "deals.xlsx"
    wb.save(src)
    _use_source(src)

    body = client.get("/deals").json()
    assert body["success"] is True
    assert body["data"][0]["close"] == "2025-07-15"
    assert body["data"][0]["cycle"] == "yearly"


def test_deals_failure_envelope_when_source_missing(tmp_path):
    _use_source(tmp_path / "missing.xlsx")

    r = client.get("/deals")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is False
    assert body["error"].startswith("TableReadError:")
    assert "data" not in body


def test_deals_failure_envelope_when_extraction_raises(tmp_path, monkeypatch):
    src = tmp_path / "deals.csv"
    src.write_text(HEADER + "July 2025,Acme,Mata,100,500,monthly\n", encoding="utf-8")
    _use_source(src)

    def boom(grid):
        raise ValueError("bad row")

    monkeypatch.setattr("app.main.extract_deals", boom)

    r = client.get("/deals")
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "ValueError: bad row"}


def test_deals_empty_sheet(tmp_path):
    src = tmp_path / "deals.csv"
    src.write_text(HEADER, encoding="utf-8")
    _use_source(src)

    body = client.get("/deals").json()
    assert body["success"] is True
    assert body["data"] == []


def test_cors_allows_any_origin_by_default():
    r = client.get("/health", headers={"Origin": "https://example.github.io"})
    assert r.headers["access-control-allow-origin"] == "*"
