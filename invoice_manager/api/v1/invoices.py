"""
Invoice API Routes
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from invoice_manager.core.database import get_db
from invoice_manager.core.security import get_current_user, PermissionChecker
from invoice_manager.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceResponse, InvoiceWithItems, InvoiceStatusEnum,
    InvoiceNumberResponse, DashboardResponse, AuditLogResponse, MessageResponse
)
from invoice_manager.services.invoice_service import InvoiceService, invoice_snapshot
from invoice_manager.services.numbering_service import InvoiceNumberService
from invoice_manager.services.report_service import ReportService
from invoice_manager.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("", response_model=List[InvoiceResponse], dependencies=[Depends(PermissionChecker("invoices", "read"))])
async def list_invoices(
    company_id: Optional[int] = Query(None, alias="companyId"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    invoice_status: Optional[InvoiceStatusEnum] = Query(None, alias="status"),
    db: Session = Depends(get_db)
):
    """List invoice headers, newest first"""
    return InvoiceService(db).get_all(
        company_id=company_id,
        client_id=client_id,
        status=invoice_status.value if invoice_status else None
    )


@router.get("/dashboard", response_model=DashboardResponse, dependencies=[Depends(PermissionChecker("reports", "read"))])
async def get_dashboard(
    company_id: Optional[int] = Query(None, alias="companyId"),
    db: Session = Depends(get_db)
):
    """Status counts and paid revenue for the dashboard"""
    return ReportService(db).dashboard(company_id)


@router.get(
    "/generate-number/{client_id}",
    response_model=InvoiceNumberResponse,
    dependencies=[Depends(PermissionChecker("invoices", "generate_number"))]
)
async def generate_invoice_number(
    client_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Reserve the client's next invoice number. The number is consumed."""
    invoice_number = InvoiceNumberService(db).next_invoice_number(client_id)
    AuditService(db).log(
        action=AuditAction.NUMBER_GENERATED,
        resource_type="Client",
        resource_id=client_id,
        description=f"Invoice number {invoice_number} reserved",
        user=current_user,
        request=request
    )
    db.commit()
    return {"invoice_number": invoice_number}


@router.get("/{invoice_id}", response_model=InvoiceWithItems, dependencies=[Depends(PermissionChecker("invoices", "read"))])
async def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db)
):
    """Invoice with items and bank details"""
    return InvoiceService(db).get_or_404(invoice_id)


@router.get(
    "/{invoice_id}/history",
    response_model=List[AuditLogResponse],
    dependencies=[Depends(PermissionChecker("invoices", "history"))]
)
async def get_invoice_history(
    invoice_id: int,
    db: Session = Depends(get_db)
):
    """Audit trail of an invoice, newest first; kept after deletion"""
    return AuditService(db).get_by_resource("Invoice", invoice_id)


@router.post(
    "",
    response_model=InvoiceWithItems,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PermissionChecker("invoices", "create"))]
)
async def create_invoice(
    invoice_data: InvoiceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Create an invoice; number and totals are assigned by the server"""
    invoice_service = InvoiceService(db)
    invoice = invoice_service.create(invoice_data, current_user)
    AuditService(db).log(
        action=AuditAction.CREATE,
        resource_type="Invoice",
        resource_id=invoice.id,
        description=f"Invoice {invoice.invoice_number} created",
        user=current_user,
        request=request,
        new_values=invoice_snapshot(invoice)
    )
    db.commit()
    return invoice_service.get_or_404(invoice.id)


@router.put("/{invoice_id}", response_model=InvoiceWithItems, dependencies=[Depends(PermissionChecker("invoices", "update"))])
async def update_invoice(
    invoice_id: int,
    invoice_data: InvoiceUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    invoice_service = InvoiceService(db)
    audit_service = AuditService(db)

    old_values = invoice_snapshot(invoice_service.get_or_404(invoice_id))
    invoice = invoice_service.update(invoice_id, invoice_data, current_user)
    new_values = invoice_snapshot(invoice)

    if old_values["status"] != new_values["status"]:
        audit_service.log(
            action=AuditAction.STATUS_CHANGED,
            resource_type="Invoice",
            resource_id=invoice.id,
            description=f"Invoice {invoice.invoice_number}: {old_values['status']} -> {new_values['status']}",
            user=current_user,
            request=request,
            old_values={"status": old_values["status"]},
            new_values={"status": new_values["status"]}
        )

    audit_service.log(
        action=AuditAction.UPDATE,
        resource_type="Invoice",
        resource_id=invoice.id,
        description=f"Invoice {invoice.invoice_number} updated",
        user=current_user,
        request=request,
        old_values=old_values,
        new_values=new_values
    )
    db.commit()
    return invoice_service.get_or_404(invoice.id)


@router.delete("/{invoice_id}", response_model=MessageResponse, dependencies=[Depends(PermissionChecker("invoices", "delete"))])
async def delete_invoice(
    invoice_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Delete an invoice with its items and bank details"""
    invoice_service = InvoiceService(db)
    old_values = invoice_snapshot(invoice_service.get_or_404(invoice_id))
    invoice = invoice_service.delete(invoice_id)
    AuditService(db).log(
        action=AuditAction.DELETE,
        resource_type="Invoice",
        resource_id=invoice_id,
        description=f"Invoice {invoice.invoice_number} deleted",
        user=current_user,
        request=request,
        old_values=old_values
    )
    db.commit()
    return {"message": "Invoice deleted successfully"}
