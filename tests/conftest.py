from __future__ import annotations

import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-invoice-manager-suite"

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from invoice_manager.core.database import Base, SessionLocal, engine
from invoice_manager.core.security import create_access_token, get_password_hash
from invoice_manager.main import app
from invoice_manager.models import BankAccount, Client, ClientBankMapping, Company, User

PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


class Seeder:
    """Inserts rows in short committed sessions and returns plain values."""

    def _add(self, obj):
        session = SessionLocal()
        try:
            session.add(obj)
            session.commit()
            return obj.id
        finally:
            session.close()

    def user(self, username: str, role: str = "Admin", is_active: bool = True):
        user_id = self._add(User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=PASSWORD_HASH,
            full_name=username.title(),
            role=role,
            is_active=is_active,
        ))
        return SimpleNamespace(
            id=user_id,
            username=username,
            email=f"{username}@example.com",
            full_name=username.title(),
            role=role,
        )

    def company(self, name: str = "Acme Ltd", **fields) -> int:
        return self._add(Company(name=name, **fields))

    def client(self, company_id: int, name: str = "Globex", **fields) -> int:
        fields.setdefault("currency", "INR")
        fields.setdefault("tax_rate", Decimal("10.00"))
        fields.setdefault("invoice_number_format", "INV-{YYYY}-{####}")
        return self._add(Client(company_id=company_id, name=name, last_invoice_number=0, **fields))

    def bank_account(self, company_id: int, account_name: str = "Operating", **fields) -> int:
        fields.setdefault("bank_name", "First Bank")
        fields.setdefault("account_number", "000123456789")
        fields.setdefault("currency", "INR")
        return self._add(BankAccount(company_id=company_id, account_name=account_name, **fields))

    def mapping(self, client_id: int, bank_account_id: int, display_order: int = 1) -> int:
        return self._add(ClientBankMapping(
            client_id=client_id,
            bank_account_id=bank_account_id,
            display_order=display_order,
        ))


@pytest.fixture
def seed():
    return Seeder()


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin(seed):
    return seed.user("admin", "Admin")


@pytest.fixture
def creator(seed):
    return seed.user("creator", "InvoiceCreator")


@pytest.fixture
def viewer(seed):
    return seed.user("viewer", "ViewOnly")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def creator_headers(creator):
    return bearer(creator)


@pytest.fixture
def viewer_headers(viewer):
    return bearer(viewer)


@pytest.fixture
def headers_for():
    return bearer
