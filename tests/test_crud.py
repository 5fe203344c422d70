from __future__ import annotations

from invoice_manager.models import ClientBankMapping


def test_company_lifecycle_and_soft_delete(client, admin_headers):
    created = client.post("/api/v1/companies", json={
        "name": "Initech",
        "city": "Austin",
        "taxNumber": "TX-1",
    }, headers=admin_headers)
    assert created.status_code == 201
    company = created.json()
    assert company["taxNumber"] == "TX-1"
    assert company["isActive"] is True

    updated = client.put(f"/api/v1/companies/{company['id']}", json={"city": "Dallas"}, headers=admin_headers)
    assert updated.json()["city"] == "Dallas"
    assert updated.json()["name"] == "Initech"

    assert client.delete(f"/api/v1/companies/{company['id']}", headers=admin_headers).status_code == 200

    listed = client.get("/api/v1/companies", headers=admin_headers).json()
    assert listed == []

    with_inactive = client.get("/api/v1/companies?includeInactive=true", headers=admin_headers).json()
    assert [c["id"] for c in with_inactive] == [company["id"]]

    fetched = client.get(f"/api/v1/companies/{company['id']}", headers=admin_headers)
    assert fetched.status_code == 200
    assert fetched.json()["isActive"] is False


def test_missing_company_is_not_found(client, admin_headers):
    response = client.get("/api/v1/companies/999", headers=admin_headers)
    assert response.status_code == 404
    assert "999" in response.json()["detail"]


def test_company_update_ignores_null_required_fields(client, seed, admin_headers):
    company_id = seed.company("Initech")
    url = f"/api/v1/companies/{company_id}"

    response = client.put(url, json={"name": None, "isActive": None, "city": "Austin"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Initech"
    assert response.json()["isActive"] is True
    assert response.json()["city"] == "Austin"

    cleared = client.put(url, json={"city": None}, headers=admin_headers)
    assert cleared.status_code == 200
    assert cleared.json()["city"] is None


def test_client_defaults_and_company_filter(client, seed, creator_headers):
    first = seed.company("First")
    second = seed.company("Second")

    created = client.post("/api/v1/clients", json={"companyId": first, "name": "Wayne"}, headers=creator_headers)
    assert created.status_code == 201
    body = created.json()
    assert body["currency"] == "INR"
    assert body["invoiceNumberFormat"] == "INV-{YYYY}-{####}"
    assert body["lastInvoiceNumber"] == 0
    assert body["companyName"] == "First"

    client.post("/api/v1/clients", json={"companyId": second, "name": "Stark"}, headers=creator_headers)

    names = [c["name"] for c in client.get(f"/api/v1/clients?companyId={first}", headers=creator_headers).json()]
    assert names == ["Wayne"]


def test_client_for_unknown_company_is_rejected(client, creator_headers):
    response = client.post("/api/v1/clients", json={"companyId": 77, "name": "Nobody"}, headers=creator_headers)
    assert response.status_code == 400


def test_client_number_format_needs_counter_token(client, seed, creator_headers):
    company_id = seed.company()
    response = client.post("/api/v1/clients", json={
        "companyId": company_id,
        "name": "Bad Format",
        "invoiceNumberFormat": "INV-{YYYY}",
    }, headers=creator_headers)
    assert response.status_code == 422


def test_soft_deleted_client_is_hidden_but_fetchable(client, seed, creator_headers):
    company_id = seed.company()
    client_id = seed.client(company_id)

    assert client.delete(f"/api/v1/clients/{client_id}", headers=creator_headers).status_code == 200
    assert client.get("/api/v1/clients", headers=creator_headers).json() == []
    assert client.get(f"/api/v1/clients/{client_id}", headers=creator_headers).json()["isActive"] is False


def test_client_banks_follow_display_order(client, seed, admin_headers):
    company_id = seed.company()
    client_id = seed.client(company_id)
    savings = seed.bank_account(company_id, "Savings")
    current = seed.bank_account(company_id, "Current")
    seed.mapping(client_id, savings, display_order=2)
    seed.mapping(client_id, current, display_order=1)

    banks = client.get(f"/api/v1/clients/{client_id}/banks", headers=admin_headers).json()
    assert [b["accountName"] for b in banks] == ["Current", "Savings"]


def test_bank_account_crud(client, seed, admin_headers):
    company_id = seed.company()
    created = client.post("/api/v1/bankaccounts", json={
        "companyId": company_id,
        "accountName": "Operating",
        "bankName": "First Bank",
        "accountNumber": "12345",
        "swiftCode": "FBNKUS33",
    }, headers=admin_headers)
    assert created.status_code == 201
    account = created.json()
    assert account["currency"] == "INR"

    updated = client.put(f"/api/v1/bankaccounts/{account['id']}", json={"branch": "Downtown"}, headers=admin_headers)
    assert updated.json()["branch"] == "Downtown"

    client.delete(f"/api/v1/bankaccounts/{account['id']}", headers=admin_headers)
    assert client.get(f"/api/v1/bankaccounts?companyId={company_id}", headers=admin_headers).json() == []
    assert client.get(f"/api/v1/bankaccounts/{account['id']}", headers=admin_headers).json()["isActive"] is False


def test_mapping_is_unique_and_hard_deleted(client, seed, creator_headers, db_session):
    company_id = seed.company()
    client_id = seed.client(company_id)
    account_id = seed.bank_account(company_id)
    body = {"clientId": client_id, "bankAccountId": account_id, "displayOrder": 1}

    created = client.post("/api/v1/bankaccounts/client-mapping", json=body, headers=creator_headers)
    assert created.status_code == 201
    assert client.post("/api/v1/bankaccounts/client-mapping", json=body, headers=creator_headers).status_code == 400

    mappings = client.get(f"/api/v1/bankaccounts/by-client/{client_id}", headers=creator_headers).json()
    assert [m["bankAccountId"] for m in mappings] == [account_id]

    mapping_id = created.json()["id"]
    assert client.delete(f"/api/v1/bankaccounts/client-mapping/{mapping_id}", headers=creator_headers).status_code == 200
    assert db_session.query(ClientBankMapping).count() == 0
    assert client.delete(f"/api/v1/bankaccounts/client-mapping/{mapping_id}", headers=creator_headers).status_code == 404


def test_mapping_across_companies_is_rejected(client, seed, creator_headers):
    client_id = seed.client(seed.company("First"))
    foreign_account = seed.bank_account(seed.company("Second"))
    response = client.post("/api/v1/bankaccounts/client-mapping", json={
        "clientId": client_id,
        "bankAccountId": foreign_account,
    }, headers=creator_headers)
    assert response.status_code == 400


def test_user_management(client, admin_headers):
    created = client.post("/api/v1/users", json={
        "username": "clerk",
        "email": "clerk@example.com",
        "password": "first-pass",
        "fullName": "Clerk",
        "role": "InvoiceCreator",
    }, headers=admin_headers)
    assert created.status_code == 201
    user = created.json()
    assert user["role"] == "InvoiceCreator"

    response = client.put(f"/api/v1/users/{user['id']}", json={"password": "second-pass"}, headers=admin_headers)
    assert response.status_code == 200
    login = client.post("/api/v1/auth/login", json={"username": "clerk", "password": "second-pass"})
    assert login.status_code == 200

    client.delete(f"/api/v1/users/{user['id']}", headers=admin_headers)
    usernames = [u["username"] for u in client.get("/api/v1/users", headers=admin_headers).json()]
    assert "clerk" not in usernames
    assert client.get(f"/api/v1/users/{user['id']}", headers=admin_headers).json()["isActive"] is False

    login = client.post("/api/v1/auth/login", json={"username": "clerk", "password": "second-pass"})
    assert login.status_code == 401


def test_user_email_must_stay_unique(client, admin, creator, admin_headers):
    response = client.put(f"/api/v1/users/{creator.id}", json={"email": "admin@example.com"}, headers=admin_headers)
    assert response.status_code == 400
