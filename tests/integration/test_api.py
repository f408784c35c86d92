"""Integration tests for API endpoints"""

import httpx
import pytest
from prometheus_client import REGISTRY
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from bot_provisioning.domain.models import LoanRecord
from bot_provisioning.domain.exceptions import LoanBookAPIError


def _loan(loan_id: str, outstanding: float, maturity_date: str | None, loan_type: str = "general") -> dict:
    return {
        "id": loan_id,
        "outstanding_amount": outstanding,
        "principal_amount": outstanding,
        "interest_rate": 0.18,
        "loan_type": loan_type,
        "maturity_date": maturity_date,
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Classifications show up in Prometheus output"""
    client.post(
        "/v1/classification",
        json={"loan": _loan("m-1", 1000, "2026-06-01"), "as_of": "2026-06-30"},
    )
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "bot_classification_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_classification_endpoint(client: TestClient):
    """45 days past due general loan -> Substandard"""
    response = client.post(
        "/v1/classification",
        json={"loan": _loan("L-1", 1_000_000, "2026-05-16"), "as_of": "2026-06-30"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["loan_id"] == "L-1"
    assert data["category"] == "Substandard"
    assert data["days_past_due"] == 45
    assert data["provision_rate"] == 0.25
    assert data["provision_amount"] == 250_000
    assert data["next_review_date"].startswith("2026-07-30")


def test_classification_without_maturity_date(client: TestClient):
    response = client.post(
        "/v1/classification",
        json={"loan": _loan("L-2", 500_000, None), "as_of": "2026-06-30"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "Current"
    assert data["days_past_due"] == 0
    assert data["maturity_date_missing"] is True


def test_classification_rejects_malformed_date(client: TestClient):
    response = client.post(
        "/v1/classification",
        json={"loan": _loan("L-3", 500_000, "31/12/2026")},
    )
    assert response.status_code == 422


def test_portfolio_endpoint(client: TestClient):
    """500,000 current + 300,000 at 95 days -> NPL 37.5%, PAR90 50%"""
    response = client.post(
        "/v1/portfolio",
        json={
            "loans": [
                _loan("a", 500_000, "2026-06-30"),
                _loan("b", 300_000, "2026-03-27"),
            ],
            "as_of": "2026-06-30",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_outstanding"] == 800_000
    assert data["npl_ratio"] == 37.5
    assert data["par90"] == 50
    assert data["breakdown"]["loss"]["count"] == 1
    assert set(data["breakdown"]) == {"current", "esm", "substandard", "doubtful", "loss"}


def test_portfolio_endpoint_empty(client: TestClient):
    response = client.post("/v1/portfolio", json={"loans": []})

    assert response.status_code == 200
    data = response.json()
    assert data["total_outstanding"] == 0
    assert data["npl_ratio"] == 0
    assert data["provision_coverage_ratio"] == 0


def test_compliance_endpoint(client: TestClient):
    loan = _loan("L-4", 1_000_000, "2026-05-16")

    compliant = client.post(
        "/v1/compliance",
        json={"loan": loan, "category": "Substandard", "provision_rate": 0.25, "as_of": "2026-06-30"},
    )
    stale = client.post(
        "/v1/compliance",
        json={"loan": loan, "category": "Especially Mentioned", "provision_rate": 0.05, "as_of": "2026-06-30"},
    )

    assert compliant.status_code == 200
    assert compliant.json()["compliant"] is True
    assert stale.json()["compliant"] is False
    assert stale.json()["expected"]["category"] == "Substandard"


def test_criteria_endpoint(client: TestClient):
    response = client.get("/v1/criteria")

    assert response.status_code == 200
    data = response.json()
    assert data["provision_rates"]["Especially Mentioned"] == 0.05
    assert data["general_loans"][-1] == {"category": "Loss", "min_days": 91, "max_days": None}
    assert [b["category"] for b in data["housing_microfinance"]] == ["Current", "Substandard", "Doubtful", "Loss"]


@patch("bot_provisioning.infrastructure.clients.loan_book.LoanBookClient.get_loans")
def test_report_endpoint(mock_loan_book: AsyncMock, client: TestClient, sample_loans: list[LoanRecord]):
    """POST /v1/reports classifies the fetched book and archives it"""
    mock_loan_book.return_value = sample_loans

    response = client.post("/v1/reports", json={"tenant_id": "tenant-1", "as_of": "2026-06-30"})

    assert response.status_code == 200
    data = response.json()
    assert data["report_id"]
    assert data["tenant_id"] == "tenant-1"
    assert data["institution_name"] == "RYTHM Microfinance Limited"
    assert data["msp_code"] == "MSP001"
    assert data["compliance_status"] == "BOT_COMPLIANT"
    assert data["portfolio"]["loan_count"] == len(sample_loans)
    assert data["portfolio"]["total_outstanding"] == 4_300_000
    assert len(data["criteria"]["general_loans"]) == 5


@patch("bot_provisioning.infrastructure.clients.loan_book.LoanBookClient.get_loans")
def test_report_endpoint_loan_book_unavailable(mock_loan_book: AsyncMock, client: TestClient):
    mock_loan_book.side_effect = LoanBookAPIError("Loan book API timeout after 5.0s")

    response = client.post("/v1/reports", json={"tenant_id": "tenant-1"})

    assert response.status_code == 503


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
def test_report_endpoint_malformed_loan_book_body(mock_get: AsyncMock, client: TestClient):
    """A null loans field from the loan book is reported as 503 and counted as a fetch failure"""
    request = httpx.Request("GET", "http://localhost:8001/loans")
    mock_get.return_value = httpx.Response(200, json={"loans": None}, request=request)
    failures_before = REGISTRY.get_sample_value("loan_book_fetch_failures_total") or 0

    response = client.post("/v1/reports", json={"tenant_id": "tenant-1"})

    assert response.status_code == 503
    assert REGISTRY.get_sample_value("loan_book_fetch_failures_total") == failures_before + 1


@patch("bot_provisioning.infrastructure.clients.loan_book.LoanBookClient.get_loans")
def test_get_report_endpoint(mock_loan_book: AsyncMock, client: TestClient, sample_loans: list[LoanRecord]):
    """GET /v1/reports/{report_id} returns the archived breakdown"""
    mock_loan_book.return_value = sample_loans

    report_id = client.post(
        "/v1/reports", json={"tenant_id": "tenant-1", "as_of": "2026-06-30"}
    ).json()["report_id"]

    response = client.get(f"/v1/reports/{report_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["report_id"] == report_id
    assert data["report_date"].startswith("2026-06-30T00:00:00")
    assert data["portfolio"]["breakdown"]["doubtful"]["count"] == 2
    assert data["portfolio"]["total_outstanding"] == 4_300_000


def test_get_report_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/v1/reports/{fake_uuid}")
    assert response.status_code == 404


def test_get_report_invalid_id(client: TestClient):
    response = client.get("/v1/reports/not-a-uuid")
    assert response.status_code == 400


@patch("bot_provisioning.infrastructure.clients.loan_book.LoanBookClient.get_loans")
def test_report_history_endpoint(mock_loan_book: AsyncMock, client: TestClient, sample_loans: list[LoanRecord]):
    mock_loan_book.return_value = sample_loans

    client.post("/v1/reports", json={"tenant_id": "tenant-1", "as_of": "2026-05-31"})
    client.post("/v1/reports", json={"tenant_id": "tenant-1", "as_of": "2026-06-30"})
    client.post("/v1/reports", json={"tenant_id": "tenant-2", "as_of": "2026-06-30"})

    response = client.get("/v1/reports/history?tenant_id=tenant-1")

    assert response.status_code == 200
    data = response.json()
    assert data["tenant_id"] == "tenant-1"
    assert len(data["reports"]) == 2
    assert data["reports"][0]["report_date"].startswith("2026-06-30")


@patch("bot_provisioning.infrastructure.clients.loan_book.LoanBookClient.get_loans")
def test_report_history_orders_by_as_of_date(mock_loan_book: AsyncMock, client: TestClient, sample_loans: list[LoanRecord]):
    """Reports archived within the same second still list the latest as-of date first"""
    mock_loan_book.return_value = sample_loans

    for as_of in ["2026-06-30", "2026-03-31", "2026-05-31", "2026-04-30"]:
        client.post("/v1/reports", json={"tenant_id": "tenant-1", "as_of": as_of})

    reports = client.get("/v1/reports/history?tenant_id=tenant-1").json()["reports"]

    report_dates = [r["report_date"][:10] for r in reports]
    assert report_dates == ["2026-06-30", "2026-05-31", "2026-04-30", "2026-03-31"]


def test_unmatched_paths_share_one_metrics_label(client: TestClient):
    """Unknown paths are recorded under a fixed endpoint label, not the raw path"""
    labels = {"method": "GET", "endpoint": "unmatched", "status": "404"}
    before = REGISTRY.get_sample_value("http_request_duration_seconds_count", labels) or 0

    client.get("/no/such/path/8f14e45f")
    client.get("/another/unknown/path")

    assert REGISTRY.get_sample_value("http_request_duration_seconds_count", labels) == before + 2
    raw_path_labels = {"method": "GET", "endpoint": "/no/such/path/8f14e45f", "status": "404"}
    assert REGISTRY.get_sample_value("http_request_duration_seconds_count", raw_path_labels) is None
