"""
Pydantic Schemas for API Validation

Wire format is camelCase; requests also accept snake_case field names.
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional
from typing_extensions import Annotated
from datetime import datetime, date
from decimal import Decimal
from enum import Enum


# Decimals go out as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

NUMBER_TOKENS = ("{####}", "{###}")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ORMModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ==================== ENUMS ====================

class UserRoleEnum(str, Enum):
    ADMIN = "Admin"
    INVOICE_CREATOR = "InvoiceCreator"
    VIEW_ONLY = "ViewOnly"


class InvoiceStatusEnum(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    CANCELLED = "Cancelled"


# ==================== COMMON ====================

class MessageResponse(BaseModel):
    message: str


# ==================== AUTH SCHEMAS ====================

class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    full_name: str
    role: UserRoleEnum
    email: str


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=200)
    role: UserRoleEnum = UserRoleEnum.VIEW_ONLY


# ==================== USER SCHEMAS ====================

class UserCreate(RegisterRequest):
    is_active: bool = True


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[UserRoleEnum] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(ORMModel):
    id: int
    username: str
    email: str
    full_name: str
    role: UserRoleEnum
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


# ==================== COMPANY SCHEMAS ====================

class CompanyBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = Field(None, max_length=500)
    tax_number: Optional[str] = Field(None, max_length=100)


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = Field(None, max_length=500)
    tax_number: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class CompanyResponse(ORMModel):
    id: int
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    tax_number: Optional[str] = None
    is_active: bool
    created_at: datetime


# ==================== CLIENT SCHEMAS ====================

def _check_number_format(value: Optional[str]) -> Optional[str]:
    if value is not None and not any(token in value for token in NUMBER_TOKENS):
        raise ValueError("invoiceNumberFormat must contain a {####} or {###} counter token")
    return value


class ClientBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_person: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    tax_number: Optional[str] = Field(None, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_type: Optional[str] = Field(None, max_length=50)
    invoice_number_format: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("invoice_number_format")
    @classmethod
    def check_number_format(cls, value):
        return _check_number_format(value)


class ClientCreate(ClientBase):
    company_id: int


class ClientUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_person: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    tax_number: Optional[str] = Field(None, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    tax_type: Optional[str] = Field(None, max_length=50)
    invoice_number_format: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None

    @field_validator("invoice_number_format")
    @classmethod
    def check_number_format(cls, value):
        return _check_number_format(value)


class ClientResponse(ORMModel):
    id: int
    company_id: int
    company_name: Optional[str] = None
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    tax_number: Optional[str] = None
    currency: str
    tax_rate: Money
    tax_type: Optional[str] = None
    invoice_number_format: str
    last_invoice_number: int
    is_active: bool
    created_at: datetime


# ==================== BANK ACCOUNT SCHEMAS ====================

class BankAccountBase(CamelModel):
    account_name: str = Field(..., min_length=1, max_length=200)
    bank_name: str = Field(..., min_length=1, max_length=200)
    account_number: str = Field(..., min_length=1, max_length=100)
    ifsc_code: Optional[str] = Field(None, max_length=50)
    swift_code: Optional[str] = Field(None, max_length=50)
    branch: Optional[str] = Field(None, max_length=200)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    additional_details: Optional[str] = None


class BankAccountCreate(BankAccountBase):
    company_id: int


class BankAccountUpdate(CamelModel):
    account_name: Optional[str] = Field(None, min_length=1, max_length=200)
    bank_name: Optional[str] = Field(None, min_length=1, max_length=200)
    account_number: Optional[str] = Field(None, min_length=1, max_length=100)
    ifsc_code: Optional[str] = Field(None, max_length=50)
    swift_code: Optional[str] = Field(None, max_length=50)
    branch: Optional[str] = Field(None, max_length=200)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    additional_details: Optional[str] = None
    is_active: Optional[bool] = None


class BankAccountResponse(ORMModel):
    id: int
    company_id: int
    account_name: str
    bank_name: str
    account_number: str
    ifsc_code: Optional[str] = None
    swift_code: Optional[str] = None
    branch: Optional[str] = None
    currency: str
    additional_details: Optional[str] = None
    is_active: bool
    created_at: datetime


class ClientBankMappingCreate(CamelModel):
    client_id: int
    bank_account_id: int
    display_order: int = Field(default=1, ge=1)


class ClientBankMappingResponse(ORMModel):
    id: int
    client_id: int
    bank_account_id: int
    display_order: int
    is_active: bool
    created_at: datetime


# ==================== INVOICE SCHEMAS ====================

class InvoiceItemCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    amount: Optional[Decimal] = Field(None, ge=0)


class InvoiceItemResponse(ORMModel):
    id: int
    line_number: int
    description: str
    quantity: Money
    unit_price: Money
    amount: Money


class InvoiceBankDetailCreate(CamelModel):
    bank_account_id: int
    display_order: Optional[int] = Field(None, ge=1)


class InvoiceBankDetailResponse(ORMModel):
    id: int
    bank_account_id: int
    display_order: int
    bank_account: Optional[BankAccountResponse] = None


class InvoiceCreate(CamelModel):
    company_id: int
    client_id: int
    invoice_date: date
    due_date: Optional[date] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    status: InvoiceStatusEnum = InvoiceStatusEnum.DRAFT
    notes: Optional[str] = None
    terms: Optional[str] = None
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    bank_details: Optional[List[InvoiceBankDetailCreate]] = None


class InvoiceUpdate(CamelModel):
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    status: Optional[InvoiceStatusEnum] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = Field(None, min_length=1)
    bank_details: Optional[List[InvoiceBankDetailCreate]] = None


class InvoiceResponse(ORMModel):
    id: int
    company_id: int
    company_name: Optional[str] = None
    client_id: int
    client_name: Optional[str] = None
    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    currency: str
    sub_total: Money
    tax_rate: Money
    tax_amount: Money
    total_amount: Money
    status: InvoiceStatusEnum
    notes: Optional[str] = None
    terms: Optional[str] = None
    created_by: int
    created_by_username: Optional[str] = None
    modified_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class InvoiceWithItems(InvoiceResponse):
    items: List[InvoiceItemResponse] = []
    bank_details: List[InvoiceBankDetailResponse] = []


class InvoiceNumberResponse(CamelModel):
    invoice_number: str


# ==================== REPORT SCHEMAS ====================

class CurrencyRevenue(CamelModel):
    currency: str
    total_revenue: Money
    invoice_count: int


class MonthlyRevenue(CamelModel):
    year: int
    month: int
    currency: str
    total_revenue: Money
    invoice_count: int


class ClientSales(CamelModel):
    client_id: int
    client_name: str
    currency: str
    total_sales: Money
    invoice_count: int


class StatusSummary(CamelModel):
    status: InvoiceStatusEnum
    currency: str
    invoice_count: int
    total_amount: Money


class TopClient(CamelModel):
    client_id: int
    client_name: str
    total_sales: Money
    invoice_count: int


class DashboardResponse(CamelModel):
    total_invoices: int
    status_counts: Dict[str, int]
    revenue_by_currency: List[CurrencyRevenue]
    monthly_revenue: List[MonthlyRevenue]


# ==================== AUDIT SCHEMAS ====================

class AuditLogResponse(ORMModel):
    id: int
    timestamp: datetime
    user_id: Optional[int] = None
    username: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[int] = None
    description: Optional[str] = None
    old_values: Optional[str] = None
    new_values: Optional[str] = None
    status: str
