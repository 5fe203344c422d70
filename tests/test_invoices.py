from __future__ import annotations

from datetime import date

import pytest

from invoice_manager.core.config import settings
from invoice_manager.models import Client, Invoice, InvoiceItem


@pytest.fixture
def billing(seed):
    company_id = seed.company()
    client_id = seed.client(company_id)
    return company_id, client_id


def _body(company_id, client_id, **overrides):
    body = {
        "companyId": company_id,
        "clientId": client_id,
        "invoiceDate": "2024-03-15",
        "dueDate": "2024-04-14",
        "items": [
            {"description": "Design", "quantity": 2, "unitPrice": 100},
            {"description": "Hosting", "quantity": 1, "unitPrice": 50},
        ],
    }
    body.update(overrides)
    return body


def test_create_invoice_assigns_number_and_totals(client, billing, creator, creator_headers):
    company_id, client_id = billing
    response = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers)
    assert response.status_code == 201
    invoice = response.json()

    assert invoice["invoiceNumber"] == f"INV-{date.today().year}-0001"
    assert invoice["status"] == "Draft"
    assert invoice["currency"] == "INR"
    assert invoice["taxRate"] == 10.0
    assert invoice["subTotal"] == 250.0
    assert invoice["taxAmount"] == 25.0
    assert invoice["totalAmount"] == 275.0
    assert invoice["createdBy"] == creator.id
    assert invoice["createdByUsername"] == "creator"
    assert invoice["clientName"] == "Globex"
    assert [item["amount"] for item in invoice["items"]] == [200.0, 50.0]


def test_items_come_back_in_original_order(client, billing, creator_headers):
    company_id, client_id = billing
    descriptions = ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]
    items = [{"description": d, "quantity": 1, "unitPrice": 10} for d in descriptions]

    created = client.post("/api/v1/invoices", json=_body(company_id, client_id, items=items), headers=creator_headers)
    fetched = client.get(f"/api/v1/invoices/{created.json()['id']}", headers=creator_headers).json()

    assert [i["lineNumber"] for i in fetched["items"]] == [1, 2, 3, 4, 5]
    assert [i["description"] for i in fetched["items"]] == descriptions


def test_header_overrides_client_defaults(client, billing, creator_headers):
    company_id, client_id = billing
    body = _body(company_id, client_id, currency="USD", taxRate=0, status="Sent")
    invoice = client.post("/api/v1/invoices", json=body, headers=creator_headers).json()
    assert invoice["currency"] == "USD"
    assert invoice["status"] == "Sent"
    assert invoice["totalAmount"] == 250.0


def test_mismatched_item_amount_is_rejected(client, billing, creator_headers, db_session):
    company_id, client_id = billing
    items = [{"description": "Design", "quantity": 2, "unitPrice": 100, "amount": 150}]
    response = client.post("/api/v1/invoices", json=_body(company_id, client_id, items=items), headers=creator_headers)
    assert response.status_code == 400
    assert db_session.query(Invoice).count() == 0
    assert db_session.get(Client, client_id).last_invoice_number == 0


def test_invoice_needs_items(client, billing, creator_headers):
    company_id, client_id = billing
    response = client.post("/api/v1/invoices", json=_body(company_id, client_id, items=[]), headers=creator_headers)
    assert response.status_code == 422


def test_client_must_belong_to_company_and_be_active(client, seed, billing, creator_headers):
    company_id, client_id = billing
    other_company = seed.company("Other")
    response = client.post("/api/v1/invoices", json=_body(other_company, client_id), headers=creator_headers)
    assert response.status_code == 400

    client.delete(f"/api/v1/clients/{client_id}", headers=creator_headers)
    response = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers)
    assert response.status_code == 400


def test_new_invoice_may_start_with_any_status(client, billing, creator_headers):
    company_id, client_id = billing
    response = client.post("/api/v1/invoices", json=_body(company_id, client_id, status="Paid"), headers=creator_headers)
    assert response.status_code == 201
    assert response.json()["status"] == "Paid"


def test_enforced_new_invoice_cannot_start_paid(client, billing, creator_headers, monkeypatch):
    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", True)
    company_id, client_id = billing
    response = client.post("/api/v1/invoices", json=_body(company_id, client_id, status="Paid"), headers=creator_headers)
    assert response.status_code == 400


def test_bank_details_default_to_client_mappings(client, seed, billing, creator_headers):
    company_id, client_id = billing
    first = seed.bank_account(company_id, "First")
    second = seed.bank_account(company_id, "Second")
    seed.mapping(client_id, second, display_order=1)
    seed.mapping(client_id, first, display_order=2)

    invoice = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()
    assert [d["bankAccountId"] for d in invoice["bankDetails"]] == [second, first]
    assert invoice["bankDetails"][0]["bankAccount"]["accountName"] == "Second"

    explicit_empty = client.post(
        "/api/v1/invoices", json=_body(company_id, client_id, bankDetails=[]), headers=creator_headers
    ).json()
    assert explicit_empty["bankDetails"] == []


def test_bank_details_must_belong_to_company(client, seed, billing, creator_headers):
    company_id, client_id = billing
    foreign = seed.bank_account(seed.company("Other"))
    body = _body(company_id, client_id, bankDetails=[{"bankAccountId": foreign}])
    assert client.post("/api/v1/invoices", json=body, headers=creator_headers).status_code == 400


def test_status_updates_are_free_form_by_default(client, billing, creator_headers):
    company_id, client_id = billing
    invoice_id = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()["id"]
    url = f"/api/v1/invoices/{invoice_id}"

    for step in ("Sent", "Paid", "Draft", "Cancelled", "Sent"):
        response = client.put(url, json={"status": step}, headers=creator_headers)
        assert response.status_code == 200
        assert response.json()["status"] == step

    assert client.put(url, json={"status": "Archived"}, headers=creator_headers).status_code == 422


def test_enforced_status_transitions(client, billing, creator_headers, monkeypatch):
    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", True)
    company_id, client_id = billing
    invoice_id = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()["id"]
    url = f"/api/v1/invoices/{invoice_id}"

    assert client.put(url, json={"status": "Paid"}, headers=creator_headers).status_code == 400
    assert client.put(url, json={"status": "Sent"}, headers=creator_headers).json()["status"] == "Sent"
    assert client.put(url, json={"status": "Draft"}, headers=creator_headers).status_code == 400
    assert client.put(url, json={"status": "Paid"}, headers=creator_headers).json()["status"] == "Paid"
    assert client.put(url, json={"status": "Paid"}, headers=creator_headers).status_code == 200

    response = client.put(url, json={"status": "Draft"}, headers=creator_headers)
    assert response.status_code == 400
    assert client.get(url, headers=creator_headers).json()["status"] == "Paid"


def test_update_replaces_items_and_recomputes(client, billing, creator, creator_headers, db_session):
    company_id, client_id = billing
    created = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()

    response = client.put(f"/api/v1/invoices/{created['id']}", json={
        "taxRate": 5,
        "items": [{"description": "Retainer", "quantity": 3, "unitPrice": 40}],
        "notes": "Updated",
    }, headers=creator_headers)
    assert response.status_code == 200
    invoice = response.json()

    assert [(i["lineNumber"], i["description"]) for i in invoice["items"]] == [(1, "Retainer")]
    assert invoice["subTotal"] == 120.0
    assert invoice["taxAmount"] == 6.0
    assert invoice["totalAmount"] == 126.0
    assert invoice["invoiceNumber"] == created["invoiceNumber"]
    assert invoice["modifiedBy"] == creator.id
    assert invoice["notes"] == "Updated"
    assert db_session.query(InvoiceItem).count() == 1


def test_tax_rate_change_alone_recomputes(client, billing, creator_headers):
    company_id, client_id = billing
    created = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()
    invoice = client.put(f"/api/v1/invoices/{created['id']}", json={"taxRate": 20}, headers=creator_headers).json()
    assert invoice["taxAmount"] == 50.0
    assert invoice["totalAmount"] == 300.0


def test_generated_numbers_are_consumed(client, billing, creator_headers):
    company_id, client_id = billing
    year = date.today().year

    first = client.get(f"/api/v1/invoices/generate-number/{client_id}", headers=creator_headers).json()
    second = client.get(f"/api/v1/invoices/generate-number/{client_id}", headers=creator_headers).json()
    assert first["invoiceNumber"] == f"INV-{year}-0001"
    assert second["invoiceNumber"] == f"INV-{year}-0002"

    invoice = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()
    assert invoice["invoiceNumber"] == f"INV-{year}-0003"


def test_generate_number_for_unknown_client(client, creator_headers):
    assert client.get("/api/v1/invoices/generate-number/999", headers=creator_headers).status_code == 404


def test_list_filters(client, seed, billing, creator_headers):
    company_id, client_id = billing
    other_client = seed.client(company_id, name="Initech")
    client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers)
    client.post("/api/v1/invoices", json=_body(company_id, other_client, status="Sent"), headers=creator_headers)

    by_client = client.get(f"/api/v1/invoices?clientId={other_client}", headers=creator_headers).json()
    assert [i["clientName"] for i in by_client] == ["Initech"]

    drafts = client.get("/api/v1/invoices?status=Draft", headers=creator_headers).json()
    assert [i["clientId"] for i in drafts] == [client_id]

    assert len(client.get(f"/api/v1/invoices?companyId={company_id}", headers=creator_headers).json()) == 2


def test_delete_is_hard_and_history_survives(client, billing, creator_headers, admin_headers, db_session):
    company_id, client_id = billing
    invoice_id = client.post("/api/v1/invoices", json=_body(company_id, client_id), headers=creator_headers).json()["id"]
    client.put(f"/api/v1/invoices/{invoice_id}", json={"status": "Sent"}, headers=creator_headers)

    assert client.delete(f"/api/v1/invoices/{invoice_id}", headers=creator_headers).status_code == 200
    assert client.get(f"/api/v1/invoices/{invoice_id}", headers=creator_headers).status_code == 404
    assert db_session.query(InvoiceItem).count() == 0

    history = client.get(f"/api/v1/invoices/{invoice_id}/history", headers=admin_headers).json()
    actions = {entry["action"] for entry in history}
    assert {"CREATE", "STATUS_CHANGED", "UPDATE", "DELETE"} <= actions
    assert all(entry["username"] == "creator" for entry in history)
