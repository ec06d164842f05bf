"""Tests for the dashboard JSON API and operational endpoints."""

import asyncio
import csv
import io
import random

import pytest

from database import OptimizedSQLitePool, run_migrations
from services.async_runner import start_background_loop, stop_background_loop
from services.contestants import ContestantSource
from services.raffle_service import RaffleService
from services.winner_store import LocalWinnerStore, WinnerLedger
from tests.conftest import make_config
from web import create_app


def run_on(loop, coro):
    return asyncio.run_coroutine_threadsafe(coro, loop).result(10)


async def _open_pool(path):
    pool = OptimizedSQLitePool(path, pool_size=2, busy_timeout_ms=1000)
    await pool.init_pool()
    await run_migrations(pool)
    return pool


@pytest.fixture
def app(tmp_path, dataset_dir):
    loop = start_background_loop()
    pool = run_on(loop, _open_pool(str(tmp_path / "web.sqlite")))
    ledger = WinnerLedger(local=LocalWinnerStore(pool))
    service = RaffleService(ledger, ContestantSource(dataset_dir), rng=random.Random(42))
    config = make_config(tmp_path, data_folder=str(dataset_dir))

    flask_app = create_app(config, raffle_service=service, db_pool=pool, testing=True)
    yield flask_app

    run_on(loop, pool.close())
    stop_background_loop(loop)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post("/api/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 200
    return client


# Authentication

def test_api_requires_login(client):
    assert client.get("/api/dashboard").status_code == 401
    assert client.post("/api/draw/discovery-70", json={"count": 1}).status_code == 401


def test_login_rejects_wrong_password(client):
    response = client.post("/api/login", json={"username": "admin", "password": "nope"})
    assert response.status_code == 401
    assert "error" in response.get_json()


def test_login_is_case_insensitive_on_username(client):
    response = client.post("/api/login", json={"username": "ADMIN", "password": "secret"})
    assert response.get_json() == {"username": "admin"}


def test_logout_ends_session(auth_client):
    assert auth_client.post("/api/logout").status_code == 200
    assert auth_client.get("/api/dashboard").status_code == 401


# Campaigns and contestants

def test_campaigns_listing(auth_client):
    data = auth_client.get("/api/campaigns").get_json()
    assert [c["id"] for c in data["campaigns"]] == ["discovery-70", "discovery-80"]
    assert data["campaigns"][1]["name"] == "80% Discovery"
    assert "APAC" in data["departments"]


def test_contestants_listing(auth_client):
    data = auth_client.get("/api/contestants/discovery-70").get_json()
    assert data["pool_size"] == 4
    assert data["total_tickets"] == 50
    assert [c["name"] for c in data["contestants"]] == ["Asha", "Bruno", "Chen", "Dev"]

    india = auth_client.get("/api/contestants/discovery-70?department=India Messaging").get_json()
    assert india["pool_size"] == 2


def test_unknown_campaign_is_404(auth_client):
    assert auth_client.get("/api/contestants/discovery-90").status_code == 404
    assert auth_client.post("/api/draw/discovery-90", json={"count": 1}).status_code == 404


# Drawing

def test_draw_records_and_excludes_winners(auth_client):
    first = auth_client.post("/api/draw/discovery-70", json={"count": 3}).get_json()
    assert first["drawn"] == 3
    assert first["label"] == "70% Discovery"

    listing = auth_client.get("/api/contestants/discovery-70").get_json()
    assert listing["eligible"] == 1
    assert listing["winners_so_far"] == 3

    second = auth_client.post("/api/draw/discovery-70", json={"count": 3}).get_json()
    assert second["drawn"] == 1
    first_names = {w["name"] for w in first["winners"]}
    assert second["winners"][0]["name"] not in first_names

    third = auth_client.post("/api/draw/discovery-70", json={"count": 1}).get_json()
    assert third["winners"] == []


def test_draw_defaults_to_one_winner(auth_client):
    data = auth_client.post("/api/draw/discovery-80", json={}).get_json()
    assert data["requested"] == 1
    assert data["weighted"] is True
    assert len(data["winners"]) == 1


@pytest.mark.parametrize("body", [{"count": 0}, {"count": 51}, {"count": "two"}, {"weighted": "yes"}])
def test_draw_rejects_invalid_requests(auth_client, body):
    response = auth_client.post("/api/draw/discovery-70", json=body)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_draw_rejects_unknown_department(auth_client):
    response = auth_client.post("/api/draw/discovery-70", json={"count": 1, "department": "EMEA"})
    assert response.status_code == 400


# Winners

def test_winners_listing_and_filters(auth_client):
    auth_client.post("/api/draw/discovery-70", json={"count": 4})
    auth_client.post("/api/draw/discovery-80", json={"count": 2})

    assert auth_client.get("/api/winners").get_json()["count"] == 6
    assert auth_client.get("/api/winners?draw_type=discovery-80").get_json()["count"] == 2

    apac = auth_client.get("/api/winners?department=APAC").get_json()
    assert sorted(w["name"] for w in apac["winners"]) == ["Chen", "Farah"]

    search = auth_client.get("/api/winners?search=vikram").get_json()
    assert [w["name"] for w in search["winners"]] == ["Dev"]


def test_winners_filter_rejects_unknown_campaign(auth_client):
    assert auth_client.get("/api/winners?draw_type=discovery-90").status_code == 400


def test_export_csv(auth_client):
    auth_client.post("/api/draw/discovery-80", json={"count": 2})

    response = auth_client.get("/api/winners/export")
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    disposition = response.headers["Content-Disposition"]
    assert disposition.startswith("attachment; filename=contest-winners-")
    assert disposition.endswith(".csv")

    rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
    assert rows[0] == ["Name", "Department", "Supervisor", "Tickets", "Draw Type", "Draw Date"]
    assert sorted(row[0] for row in rows[1:]) == ["Elena", "Farah"]
    assert {row[4] for row in rows[1:]} == {"80% Discovery"}


def test_clear_winners_by_campaign(auth_client):
    auth_client.post("/api/draw/discovery-70", json={"count": 2})
    auth_client.post("/api/draw/discovery-80", json={"count": 1})

    data = auth_client.post("/api/winners/clear", json={"draw_type": "discovery-70"}).get_json()
    assert data == {"cleared": 2, "draw_type": "discovery-70"}
    assert auth_client.get("/api/winners").get_json()["count"] == 1

    data = auth_client.post("/api/winners/clear", json={}).get_json()
    assert data == {"cleared": 1, "draw_type": None}
    assert auth_client.get("/api/winners").get_json()["count"] == 0


# Dashboard and analytics

def test_dashboard_overview(auth_client):
    auth_client.post("/api/draw/discovery-70", json={"count": 2})

    data = auth_client.get("/api/dashboard").get_json()
    assert data["total_contestants"] == 6
    assert data["total_winners"] == 2
    assert len(data["recent_winners"]) == 2
    assert len(data["departments"]) == 3


def test_analytics_chart(auth_client):
    auth_client.post("/api/draw/discovery-70", json={"count": 4})

    data = auth_client.get("/api/analytics?draw_type=discovery-70").get_json()
    assert data["chart"]["labels"] == ["International", "India", "APAC"]
    assert data["chart"]["data"] == [1, 2, 1]
    assert data["top_department"] == {"department": "India Messaging", "winners": 2}


# Operational endpoints

def test_health_reports_store_and_pool(client):
    data = client.get("/health").get_json()
    assert data["status"] == "ok"
    assert data["db_pool_size"] == 2
    assert data["winner_store"] == "local"


def test_metrics_endpoint(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert b"http_request_latency_seconds" in response.data


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Response-Time" in response.headers
