"""
Client Service - Business Logic for Clients
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload

from invoice_manager.core.config import settings
from invoice_manager.core.exceptions import NotFoundError, ValidationError
from invoice_manager.models import Client, ClientBankMapping, BankAccount
from invoice_manager.schemas import ClientCreate, ClientUpdate
from invoice_manager.services.company_service import CompanyService


class ClientService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client)\
            .options(joinedload(Client.company))\
            .filter(Client.id == client_id)\
            .first()

    def get_or_404(self, client_id: int) -> Client:
        client = self.get_by_id(client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def get_all(self, company_id: Optional[int] = None, include_inactive: bool = False) -> List[Client]:
        query = self.db.query(Client).options(joinedload(Client.company))
        if company_id is not None:
            query = query.filter(Client.company_id == company_id)
        if not include_inactive:
            query = query.filter(Client.is_active == True)
        return query.order_by(Client.name).all()

    def create(self, client_data: ClientCreate) -> Client:
        company = CompanyService(self.db).get_by_id(client_data.company_id)
        if not company:
            raise ValidationError(f"Company {client_data.company_id} does not exist")

        data = client_data.model_dump()
        data["currency"] = data.get("currency") or settings.DEFAULT_CURRENCY
        data["invoice_number_format"] = (
            data.get("invoice_number_format") or settings.DEFAULT_INVOICE_NUMBER_FORMAT
        )

        client = Client(**data, last_invoice_number=0)
        self.db.add(client)
        self.db.flush()
        return client

    def update(self, client_id: int, client_data: ClientUpdate) -> Client:
        client = self.get_or_404(client_id)

        update_data = client_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            # Non-nullable columns keep their value when null is sent
            if value is None and key in ("currency", "tax_rate", "invoice_number_format", "is_active", "name"):
                continue
            setattr(client, key, value)

        self.db.flush()
        return client

    def delete(self, client_id: int) -> Client:
        client = self.get_or_404(client_id)
        client.is_active = False
        self.db.flush()
        return client

    def get_bank_accounts(self, client_id: int, include_inactive: bool = False) -> List[BankAccount]:
        """Bank accounts mapped to a client, in display order."""
        self.get_or_404(client_id)

        query = self.db.query(BankAccount)\
            .join(ClientBankMapping, ClientBankMapping.bank_account_id == BankAccount.id)\
            .filter(ClientBankMapping.client_id == client_id)
        if not include_inactive:
            query = query.filter(
                ClientBankMapping.is_active == True,
                BankAccount.is_active == True
            )
        return query.order_by(ClientBankMapping.display_order, ClientBankMapping.id).all()
