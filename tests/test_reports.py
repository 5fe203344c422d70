from __future__ import annotations

from datetime import date

import pytest


def _create(client, headers, company_id, client_id, unit_price, currency="INR", tax_rate=0, status=None):
    body = {
        "companyId": company_id,
        "clientId": client_id,
        "invoiceDate": date.today().isoformat(),
        "currency": currency,
        "taxRate": tax_rate,
        "items": [{"description": "Work", "quantity": 1, "unitPrice": unit_price}],
    }
    invoice = client.post("/api/v1/invoices", json=body, headers=headers).json()
    path = ["Sent", "Paid"] if status == "Paid" else ([status] if status else [])
    for step in path:
        client.put(f"/api/v1/invoices/{invoice['id']}", json={"status": step}, headers=headers)
    return invoice["id"]


@pytest.fixture
def ledger(client, seed, creator_headers):
    company_id = seed.company()
    other_company = seed.company("Other Co")
    globex = seed.client(company_id, name="Globex")
    initech = seed.client(company_id, name="Initech")
    umbrella = seed.client(other_company, name="Umbrella")

    _create(client, creator_headers, company_id, globex, 1000, status="Paid")
    _create(client, creator_headers, company_id, globex, 500, status="Paid")
    _create(client, creator_headers, company_id, initech, 300, currency="USD", status="Paid")
    _create(client, creator_headers, company_id, initech, 700)
    _create(client, creator_headers, company_id, initech, 50, status="Cancelled")
    _create(client, creator_headers, other_company, umbrella, 9999, status="Paid")
    return company_id, other_company


def test_revenue_by_currency_counts_paid_only(client, ledger, viewer_headers):
    company_id, _ = ledger
    rows = client.get(f"/api/v1/reports/revenue-by-currency?companyId={company_id}", headers=viewer_headers).json()
    assert rows == [
        {"currency": "INR", "totalRevenue": 1500.0, "invoiceCount": 2},
        {"currency": "USD", "totalRevenue": 300.0, "invoiceCount": 1},
    ]


def test_sales_by_client_is_split_by_currency(client, ledger, viewer_headers):
    company_id, _ = ledger
    rows = client.get(f"/api/v1/reports/sales-by-client?companyId={company_id}", headers=viewer_headers).json()
    assert [(r["clientName"], r["currency"], r["totalSales"]) for r in rows] == [
        ("Globex", "INR", 1500.0),
        ("Initech", "USD", 300.0),
    ]


def test_status_summary_includes_every_status(client, ledger, viewer_headers):
    company_id, _ = ledger
    rows = client.get(f"/api/v1/reports/status-summary?companyId={company_id}", headers=viewer_headers).json()
    summary = {(r["status"], r["currency"]): (r["invoiceCount"], r["totalAmount"]) for r in rows}
    assert summary[("Paid", "INR")] == (2, 1500.0)
    assert summary[("Paid", "USD")] == (1, 300.0)
    assert summary[("Draft", "INR")] == (1, 700.0)
    assert summary[("Cancelled", "INR")] == (1, 50.0)


def test_top_clients_across_companies(client, ledger, viewer_headers):
    rows = client.get("/api/v1/reports/top-clients?top=2", headers=viewer_headers).json()
    assert [r["clientName"] for r in rows] == ["Umbrella", "Globex"]


def test_monthly_revenue_covers_current_month(client, ledger, viewer_headers):
    company_id, _ = ledger
    rows = client.get(f"/api/v1/reports/monthly-revenue?companyId={company_id}&months=3", headers=viewer_headers).json()
    today = date.today()
    assert {(r["year"], r["month"], r["currency"]) for r in rows} == {
        (today.year, today.month, "INR"),
        (today.year, today.month, "USD"),
    }


def test_date_range_filters(client, ledger, viewer_headers):
    company_id, _ = ledger
    past = client.get(
        f"/api/v1/reports/revenue-by-currency?companyId={company_id}&startDate=2000-01-01&endDate=2000-12-31",
        headers=viewer_headers,
    ).json()
    assert past == []


def test_dashboard(client, ledger, viewer_headers):
    company_id, _ = ledger
    dashboard = client.get(f"/api/v1/invoices/dashboard?companyId={company_id}", headers=viewer_headers).json()
    assert dashboard["totalInvoices"] == 5
    assert dashboard["statusCounts"] == {"Draft": 1, "Sent": 0, "Paid": 3, "Cancelled": 1}
    assert {r["currency"] for r in dashboard["revenueByCurrency"]} == {"INR", "USD"}
    assert len(dashboard["monthlyRevenue"]) == 2


def test_reports_require_authentication(client):
    assert client.get("/api/v1/reports/top-clients").status_code == 401
