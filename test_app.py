# test_app.py
from __future__ import annotations

import sys

import pytest
from conftest import SAMPLE_DIG_OUTPUT, FlexibleFakeRunner, answer_output, failed
from fastapi.testclient import TestClient

from digtool.runner import CommandResult
from digtool.service import DigService
from opendig.app import create_app
from opendig.config import Settings
from reporting.charts import ComparisonCharts
from subnets import SubnetInfo

SUBNETS = [
    SubnetInfo("China", "North China", "Beijing", "China Telecom", "219.141.136.0/24"),
    SubnetInfo("China", "East China", "Shanghai", "China Unicom", "112.64.0.0/24"),
    SubnetInfo("China", "South China", "Guangdong", "China Mobile", "120.196.0.0/24"),
]

RULES = [
    (["-v"], CommandResult(cmd=["dig", "-v"], stdout="", stderr="DiG 9.18.24\n")),
    (["+subnet=101.249.112.0/24"], SAMPLE_DIG_OUTPUT),
    (["+subnet=10.9.9.0/24"], failed(returncode=10)),
    (["+subnet=219.141.136.0/24"], answer_output("192.0.2.1")),
    (["+subnet=112.64.0.0/24"], failed(timed_out=True)),
    (["+subnet=120.196.0.0/24"], answer_output("192.0.2.2")),
]


def _client(rules=RULES) -> TestClient:
    settings = Settings(default_server="223.5.5.5")
    service = DigService(runner=FlexibleFakeRunner(rules), server=settings.default_server)
    return TestClient(create_app(settings=settings, service=service, subnets=SUBNETS))


@pytest.fixture
def client():
    with _client() as c:
        yield c


# ----------------------------
# /api/dig
# ----------------------------
def test_single_subnet_returns_one_result(client):
    r = client.post("/api/dig", json={"domain": "www.example.com", "recordType": "a", "subnet": "101.249.112.0/24"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["parsed"]["status"] == "NOERROR"
    assert data["parsed"]["rcode"] == 0
    assert data["parsed"]["lastCname"] == "a1422.dscr.akamai.net."
    assert data["parsed"]["subnet"] == {"subnet": "101.249.112.0/24", "scope": 24}
    assert data["parsed"]["header"]["id"] == 49969
    assert data["output"].startswith("; dig www.example.com A +subnet=101.249.112.0/24 @223.5.5.5")
    assert "totalQueries" not in data


def test_no_subnet_fans_out_over_registry(client):
    r = client.post("/api/dig", json={"domain": "example.com"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["totalQueries"] == 3
    assert data["successCount"] == 2
    assert data["failureCount"] == 1
    assert data["failedResults"][0]["subnetInfo"]["province"] == "Shanghai"
    assert data["failedResults"][0]["error"] == "Query failed"


def test_validation_errors_are_listed(client):
    r = client.post("/api/dig", json={"domain": "bad;domain", "recordType": "NOPE", "subnet": "999.1.1.1/24"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "InvalidParameters"
    assert len(body["errors"]) == 3


def test_missing_domain_is_a_validation_error(client):
    r = client.post("/api/dig", json={})
    assert r.status_code == 400
    assert r.json()["errors"] == ["Domain must not be empty"]


def test_non_json_body_is_a_validation_error(client):
    r = client.post("/api/dig", content=b"domain=example.com", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["code"] == "InvalidParameters"
    assert r.json()["errors"] == ["Request body must be valid JSON"]


def test_json_array_body_is_not_an_object(client):
    r = client.post("/api/dig", json=["example.com"])
    assert r.status_code == 400
    assert r.json()["errors"] == ["Request body must be a JSON object"]


def test_wrong_field_type_names_the_field(client):
    r = client.post("/api/dig", json={"domain": 123})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert len(errors) == 1
    assert errors[0].startswith("domain: ")
    assert "JSON object" not in errors[0]


def test_execution_failure_is_generic(client):
    r = client.post("/api/dig", json={"domain": "example.com", "subnet": "10.9.9.0/24"})
    assert r.status_code == 500
    body = r.json()
    assert body == {"code": "DigCommandFailed", "message": "Failed to execute dig command"}


def test_invalid_input_never_spawns_dig():
    runner = FlexibleFakeRunner(RULES)
    app = create_app(settings=Settings(), service=DigService(runner=runner), subnets=SUBNETS)
    with TestClient(app) as c:
        c.post("/api/dig", json={"domain": "example.com`id`"})
    assert runner.calls == []


# ----------------------------
# /api/status
# ----------------------------
def test_status_ready(client):
    r = client.get("/api/status")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data == {
        "toolAvailable": True,
        "toolPath": "dig",
        "version": "DiG 9.18.24",
        "error": None,
        "status": "ready",
        "platform": sys.platform,
        "defaultServer": "223.5.5.5",
    }


def test_status_not_found():
    rules = [(["-v"], CommandResult(cmd=["dig", "-v"], stdout="", stderr="", returncode=None, not_found=True))]
    with _client(rules) as c:
        data = c.get("/api/status").json()["data"]
    assert data["toolAvailable"] is False
    assert data["status"] == "dig tool not found"
    assert data["error"] == "Dig tool not available"


# ----------------------------
# Misc routes
# ----------------------------
def test_compare_png(client):
    r = client.get("/api/dig/compare.png", params={"domain": "example.com", "recordType": "A"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content.startswith(b"\x89PNG")


def test_compare_png_rejects_bad_domain(client):
    r = client.get("/api/dig/compare.png", params={"domain": "localhost"})
    assert r.status_code == 400


def test_health_and_home(client):
    assert client.get("/health").json() == {"ok": True}
    r = client.get("/")
    assert r.status_code == 200
    assert "OpenDig" in r.text


def test_compare_png_missing_domain_names_the_parameter(client):
    r = client.get("/api/dig/compare.png")
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "InvalidParameters"
    assert body["errors"][0].startswith("domain: ")


def test_compare_png_overlong_domain_names_the_parameter(client):
    r = client.get("/api/dig/compare.png", params={"domain": "a" * 254})
    assert r.status_code == 400
    assert r.json()["errors"][0].startswith("domain: ")


def test_unexpected_error_in_chart_is_structured_json(monkeypatch):
    def _boom(self, analytics, title=""):
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(ComparisonCharts, "render_png", _boom)
    settings = Settings(default_server="223.5.5.5")
    service = DigService(runner=FlexibleFakeRunner(RULES), server=settings.default_server)
    app = create_app(settings=settings, service=service, subnets=SUBNETS)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/dig/compare.png", params={"domain": "example.com"})
    assert r.status_code == 500
    assert r.headers["content-type"] == "application/json"
    assert r.json() == {"code": "DigCommandFailed", "message": "Failed to execute dig command"}
