"""
Invoice Service - Business Logic for Invoices
"""
from typing import Optional, List
import logging

from sqlalchemy.orm import Session, joinedload, selectinload

from invoice_manager.core.exceptions import NotFoundError, ValidationError
from invoice_manager.models import Invoice, InvoiceItem, InvoiceBankDetail, Client, BankAccount
from invoice_manager.schemas import InvoiceCreate, InvoiceUpdate, InvoiceBankDetailCreate, InvoiceItemCreate
from invoice_manager.services.invoice_calculator import calculate_totals, resolve_line_amount, quantize
from invoice_manager.services.invoice_lifecycle import check_transition, check_initial_status
from invoice_manager.services.numbering_service import InvoiceNumberService
from invoice_manager.services.banking_service import ClientBankMappingService

logger = logging.getLogger(__name__)


def invoice_snapshot(invoice: Invoice) -> dict:
    """Header values recorded in the audit trail"""
    return {
        "invoice_number": invoice.invoice_number,
        "status": invoice.status,
        "invoice_date": invoice.invoice_date,
        "due_date": invoice.due_date,
        "currency": invoice.currency,
        "sub_total": invoice.sub_total,
        "tax_rate": invoice.tax_rate,
        "tax_amount": invoice.tax_amount,
        "total_amount": invoice.total_amount,
        "item_count": len(invoice.items),
    }


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        return self.db.query(Invoice)\
            .options(
                joinedload(Invoice.company),
                joinedload(Invoice.client),
                joinedload(Invoice.created_by_user),
                selectinload(Invoice.items),
                selectinload(Invoice.bank_details).joinedload(InvoiceBankDetail.bank_account)
            )\
            .filter(Invoice.id == invoice_id)\
            .first()

    def get_or_404(self, invoice_id: int) -> Invoice:
        invoice = self.get_by_id(invoice_id)
        if not invoice:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def get_all(
        self,
        company_id: Optional[int] = None,
        client_id: Optional[int] = None,
        status: Optional[str] = None
    ) -> List[Invoice]:
        query = self.db.query(Invoice).options(
            joinedload(Invoice.company),
            joinedload(Invoice.client),
            joinedload(Invoice.created_by_user)
        )
        if company_id is not None:
            query = query.filter(Invoice.company_id == company_id)
        if client_id is not None:
            query = query.filter(Invoice.client_id == client_id)
        if status:
            query = query.filter(Invoice.status == status)
        return query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc()).all()

    def _build_items(self, items_data: List[InvoiceItemCreate]) -> List[InvoiceItem]:
        items = []
        for line_number, item_data in enumerate(items_data, start=1):
            items.append(InvoiceItem(
                line_number=line_number,
                description=item_data.description,
                quantity=quantize(item_data.quantity),
                unit_price=quantize(item_data.unit_price),
                amount=resolve_line_amount(item_data.quantity, item_data.unit_price, item_data.amount)
            ))
        return items

    def _build_bank_details(
        self,
        company_id: int,
        details_data: List[InvoiceBankDetailCreate]
    ) -> List[InvoiceBankDetail]:
        details = []
        seen = set()
        for position, detail_data in enumerate(details_data, start=1):
            account_id = detail_data.bank_account_id
            if account_id in seen:
                raise ValidationError(f"Bank account {account_id} is listed more than once")
            seen.add(account_id)

            account = self.db.query(BankAccount).filter(BankAccount.id == account_id).first()
            if not account:
                raise ValidationError(f"Bank account {account_id} does not exist")
            if account.company_id != company_id:
                raise ValidationError(f"Bank account {account_id} does not belong to company {company_id}")

            details.append(InvoiceBankDetail(
                bank_account_id=account_id,
                display_order=detail_data.display_order or position
            ))
        return details

    def _default_bank_details(self, client: Client) -> List[InvoiceBankDetail]:
        mappings = ClientBankMappingService(self.db).get_by_client(client.id)
        details = []
        for mapping in mappings:
            if mapping.bank_account and mapping.bank_account.is_active:
                details.append(InvoiceBankDetail(
                    bank_account_id=mapping.bank_account_id,
                    display_order=mapping.display_order
                ))
        return details

    def _apply_totals(self, invoice: Invoice):
        totals = calculate_totals([item.amount for item in invoice.items], invoice.tax_rate)
        invoice.sub_total = totals.sub_total
        invoice.tax_amount = totals.tax_amount
        invoice.total_amount = totals.total_amount

    def create(self, invoice_data: InvoiceCreate, user) -> Invoice:
        client = self.db.query(Client).filter(Client.id == invoice_data.client_id).first()
        if not client:
            raise ValidationError(f"Client {invoice_data.client_id} does not exist")
        if client.company_id != invoice_data.company_id:
            raise ValidationError(
                f"Client {client.id} does not belong to company {invoice_data.company_id}"
            )
        if not client.is_active:
            raise ValidationError(f"Client {client.id} is inactive")

        status = invoice_data.status.value
        check_initial_status(status)

        items = self._build_items(invoice_data.items)
        if invoice_data.bank_details is None:
            bank_details = self._default_bank_details(client)
        else:
            bank_details = self._build_bank_details(invoice_data.company_id, invoice_data.bank_details)

        tax_rate = invoice_data.tax_rate if invoice_data.tax_rate is not None else client.tax_rate

        # Shares this transaction; a failed insert rolls the counter back
        invoice_number = InvoiceNumberService(self.db).next_invoice_number(client.id)

        invoice = Invoice(
            company_id=invoice_data.company_id,
            client_id=client.id,
            invoice_number=invoice_number,
            invoice_date=invoice_data.invoice_date,
            due_date=invoice_data.due_date,
            currency=invoice_data.currency or client.currency,
            tax_rate=quantize(tax_rate),
            status=status,
            notes=invoice_data.notes,
            terms=invoice_data.terms,
            created_by=user.id,
            items=items,
            bank_details=bank_details
        )
        self._apply_totals(invoice)

        self.db.add(invoice)
        self.db.flush()

        logger.info(
            f"Created invoice {invoice.invoice_number} (id={invoice.id}) "
            f"for client {client.id} total={invoice.total_amount} {invoice.currency}"
        )
        return invoice

    def update(self, invoice_id: int, invoice_data: InvoiceUpdate, user) -> Invoice:
        invoice = self.get_or_404(invoice_id)
        update_data = invoice_data.model_dump(exclude_unset=True, exclude={"items", "bank_details"})

        status = update_data.pop("status", None)
        if status is not None:
            check_transition(invoice.status, status.value)
            invoice.status = status.value

        if update_data.get("tax_rate") is not None:
            update_data["tax_rate"] = quantize(update_data["tax_rate"])

        for key, value in update_data.items():
            if value is None and key in ("invoice_date", "currency", "tax_rate"):
                continue
            setattr(invoice, key, value)

        if invoice_data.items is not None:
            invoice.items = self._build_items(invoice_data.items)

        if invoice_data.bank_details is not None:
            invoice.bank_details = self._build_bank_details(invoice.company_id, invoice_data.bank_details)

        self._apply_totals(invoice)
        invoice.modified_by = user.id

        self.db.flush()
        logger.info(f"Updated invoice {invoice.invoice_number} (id={invoice.id})")
        return invoice

    def delete(self, invoice_id: int) -> Invoice:
        invoice = self.get_or_404(invoice_id)
        self.db.delete(invoice)
        self.db.flush()
        logger.info(f"Deleted invoice {invoice.invoice_number} (id={invoice_id})")
        return invoice
