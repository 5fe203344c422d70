"""
Banking Service - Bank accounts and their client mappings
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from invoice_manager.core.config import settings
from invoice_manager.core.exceptions import DuplicateError, NotFoundError, ValidationError
from invoice_manager.models import BankAccount, ClientBankMapping, Client
from invoice_manager.schemas import BankAccountCreate, BankAccountUpdate, ClientBankMappingCreate
from invoice_manager.services.company_service import CompanyService


class BankAccountService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, account_id: int) -> Optional[BankAccount]:
        return self.db.query(BankAccount).filter(BankAccount.id == account_id).first()

    def get_or_404(self, account_id: int) -> BankAccount:
        account = self.get_by_id(account_id)
        if not account:
            raise NotFoundError(f"Bank account {account_id} not found")
        return account

    def get_all(self, company_id: Optional[int] = None, include_inactive: bool = False) -> List[BankAccount]:
        query = self.db.query(BankAccount)
        if company_id is not None:
            query = query.filter(BankAccount.company_id == company_id)
        if not include_inactive:
            query = query.filter(BankAccount.is_active == True)
        return query.order_by(BankAccount.bank_name, BankAccount.account_name).all()

    def create(self, account_data: BankAccountCreate) -> BankAccount:
        if not CompanyService(self.db).get_by_id(account_data.company_id):
            raise ValidationError(f"Company {account_data.company_id} does not exist")

        data = account_data.model_dump()
        data["currency"] = data.get("currency") or settings.DEFAULT_CURRENCY

        account = BankAccount(**data)
        self.db.add(account)
        self.db.flush()
        return account

    def update(self, account_id: int, account_data: BankAccountUpdate) -> BankAccount:
        account = self.get_or_404(account_id)

        update_data = account_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if value is None and key in ("account_name", "bank_name", "account_number", "currency", "is_active"):
                continue
            setattr(account, key, value)

        self.db.flush()
        return account

    def delete(self, account_id: int) -> BankAccount:
        account = self.get_or_404(account_id)
        account.is_active = False
        self.db.flush()
        return account


class ClientBankMappingService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, mapping_id: int) -> Optional[ClientBankMapping]:
        return self.db.query(ClientBankMapping).filter(ClientBankMapping.id == mapping_id).first()

    def get_by_client(self, client_id: int, include_inactive: bool = False) -> List[ClientBankMapping]:
        query = self.db.query(ClientBankMapping).filter(ClientBankMapping.client_id == client_id)
        if not include_inactive:
            query = query.filter(ClientBankMapping.is_active == True)
        return query.order_by(ClientBankMapping.display_order, ClientBankMapping.id).all()

    def create(self, mapping_data: ClientBankMappingCreate) -> ClientBankMapping:
        client = self.db.query(Client).filter(Client.id == mapping_data.client_id).first()
        if not client:
            raise ValidationError(f"Client {mapping_data.client_id} does not exist")

        account = BankAccountService(self.db).get_by_id(mapping_data.bank_account_id)
        if not account:
            raise ValidationError(f"Bank account {mapping_data.bank_account_id} does not exist")
        if account.company_id != client.company_id:
            raise ValidationError("Bank account and client belong to different companies")

        existing = self.db.query(ClientBankMapping).filter(
            ClientBankMapping.client_id == mapping_data.client_id,
            ClientBankMapping.bank_account_id == mapping_data.bank_account_id
        ).first()
        if existing:
            raise DuplicateError("Bank account is already mapped to this client")

        mapping = ClientBankMapping(
            client_id=mapping_data.client_id,
            bank_account_id=mapping_data.bank_account_id,
            display_order=mapping_data.display_order,
            is_active=True
        )
        self.db.add(mapping)
        self.db.flush()
        return mapping

    def delete(self, mapping_id: int) -> ClientBankMapping:
        """Mappings are removed outright, not deactivated."""
        mapping = self.get_by_id(mapping_id)
        if not mapping:
            raise NotFoundError(f"Client bank mapping {mapping_id} not found")
        self.db.delete(mapping)
        self.db.flush()
        return mapping
