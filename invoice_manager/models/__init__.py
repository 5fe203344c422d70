"""
SQLAlchemy Models for the Invoice Manager
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Date, Numeric,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship
import enum

from invoice_manager.core.config import settings
from invoice_manager.core.database import Base


# ==================== ENUMS ====================

class UserRole(enum.Enum):
    ADMIN = "Admin"
    INVOICE_CREATOR = "InvoiceCreator"
    VIEW_ONLY = "ViewOnly"


class InvoiceStatus(enum.Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    CANCELLED = "Cancelled"


# ==================== IDENTITY ====================

class User(Base):
    """User account"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(100), nullable=False, unique=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.VIEW_ONLY.value)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    created_invoices = relationship(
        "Invoice", back_populates="created_by_user", foreign_keys="Invoice.created_by"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


# ==================== ORGANIZATION ====================

class Company(Base):
    """Issuing company"""
    __tablename__ = 'companies'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(100), nullable=True)
    website = Column(String(200), nullable=True)
    logo_url = Column(String(500), nullable=True)
    tax_number = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    clients = relationship("Client", back_populates="company")
    bank_accounts = relationship("BankAccount", back_populates="company")
    invoices = relationship("Invoice", back_populates="company")


class Client(Base):
    """Client billed by a company; owns the invoice number sequence"""
    __tablename__ = 'clients'

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False)
    name = Column(String(200), nullable=False)
    contact_person = Column(String(200), nullable=True)
    email = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    tax_number = Column(String(100), nullable=True)
    currency = Column(String(10), default="INR", nullable=False)
    tax_rate = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    tax_type = Column(String(50), nullable=True)  # GST, VAT
    invoice_number_format = Column(String(100), default=settings.DEFAULT_INVOICE_NUMBER_FORMAT, nullable=False)
    last_invoice_number = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    company = relationship("Company", back_populates="clients")
    bank_mappings = relationship(
        "ClientBankMapping", back_populates="client",
        cascade="all, delete-orphan", order_by="ClientBankMapping.display_order"
    )
    invoices = relationship("Invoice", back_populates="client")

    @property
    def company_name(self):
        return self.company.name if self.company else None

    __table_args__ = (
        Index('ix_clients_company_id', 'company_id'),
    )


class BankAccount(Base):
    """Bank account of a company, printed on invoices"""
    __tablename__ = 'bank_accounts'

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False)
    account_name = Column(String(200), nullable=False)
    bank_name = Column(String(200), nullable=False)
    account_number = Column(String(100), nullable=False)
    ifsc_code = Column(String(50), nullable=True)
    swift_code = Column(String(50), nullable=True)
    branch = Column(String(200), nullable=True)
    currency = Column(String(10), default="INR", nullable=False)
    additional_details = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    company = relationship("Company", back_populates="bank_accounts")
    client_mappings = relationship("ClientBankMapping", back_populates="bank_account")

    __table_args__ = (
        Index('ix_bank_accounts_company_id', 'company_id'),
    )


class ClientBankMapping(Base):
    """Ordered many-to-many link between clients and bank accounts"""
    __tablename__ = 'client_bank_mappings'

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey('clients.id', ondelete='CASCADE'), nullable=False)
    bank_account_id = Column(Integer, ForeignKey('bank_accounts.id', ondelete='CASCADE'), nullable=False)
    display_order = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="bank_mappings")
    bank_account = relationship("BankAccount", back_populates="client_mappings")

    __table_args__ = (
        UniqueConstraint('client_id', 'bank_account_id', name='uq_client_bank_mapping'),
    )


# ==================== INVOICES ====================

class Invoice(Base):
    """Invoice header; owns its items and bank detail references"""
    __tablename__ = 'invoices'

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False)
    client_id = Column(Integer, ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False)
    invoice_number = Column(String(100), nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    currency = Column(String(10), nullable=False)
    sub_total = Column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    tax_rate = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    tax_amount = Column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    total_amount = Column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    status = Column(String(20), default=InvoiceStatus.DRAFT.value, nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='RESTRICT'), nullable=False)
    modified_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    company = relationship("Company", back_populates="invoices")
    client = relationship("Client", back_populates="invoices")
    created_by_user = relationship("User", back_populates="created_invoices", foreign_keys=[created_by])
    items = relationship(
        "InvoiceItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceItem.line_number"
    )
    bank_details = relationship(
        "InvoiceBankDetail", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceBankDetail.display_order"
    )

    @property
    def client_name(self):
        return self.client.name if self.client else None

    @property
    def company_name(self):
        return self.company.name if self.company else None

    @property
    def created_by_username(self):
        return self.created_by_user.username if self.created_by_user else None

    __table_args__ = (
        UniqueConstraint('client_id', 'invoice_number', name='uq_invoice_client_number'),
        Index('ix_invoices_company_id', 'company_id'),
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_invoice_date', 'invoice_date'),
    )


class InvoiceItem(Base):
    """Invoice line item"""
    __tablename__ = 'invoice_items'

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    line_number = Column(Integer, nullable=False)
    description = Column(String(500), nullable=False)
    quantity = Column(Numeric(18, 2), nullable=False)
    unit_price = Column(Numeric(18, 2), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    invoice = relationship("Invoice", back_populates="items")


class InvoiceBankDetail(Base):
    """Bank account printed on an invoice"""
    __tablename__ = 'invoice_bank_details'

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    bank_account_id = Column(Integer, ForeignKey('bank_accounts.id', ondelete='RESTRICT'), nullable=False)
    display_order = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    invoice = relationship("Invoice", back_populates="bank_details")
    bank_account = relationship("BankAccount")


# ==================== AUDIT LOG ====================

class AuditLog(Base):
    """Audit trail for sensitive operations"""
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Who performed the action
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    username = Column(String(100), nullable=True)  # kept if the user row goes away
    ip_address = Column(String(50), nullable=True)
    user_agent = Column(String(500), nullable=True)

    # What action was performed
    action = Column(String(50), nullable=False)
    resource_type = Column(String(100), nullable=False)
    resource_id = Column(Integer, nullable=True)

    # Details
    description = Column(Text, nullable=True)
    old_values = Column(Text, nullable=True)  # JSON
    new_values = Column(Text, nullable=True)  # JSON
    request_method = Column(String(10), nullable=True)
    request_path = Column(String(500), nullable=True)

    # Status
    status = Column(String(20), default='success')  # success, failure, error
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index('ix_audit_logs_timestamp', 'timestamp'),
        Index('ix_audit_logs_resource', 'resource_type', 'resource_id'),
        Index('ix_audit_logs_action', 'action'),
    )
