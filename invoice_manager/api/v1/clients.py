"""
Client API Routes
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from invoice_manager.core.database import get_db
from invoice_manager.core.security import get_current_user, PermissionChecker
from invoice_manager.schemas import (
    ClientCreate, ClientUpdate, ClientResponse, BankAccountResponse, MessageResponse
)
from invoice_manager.services.client_service import ClientService
from invoice_manager.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=List[ClientResponse], dependencies=[Depends(PermissionChecker("clients", "read"))])
async def list_clients(
    company_id: Optional[int] = Query(None, alias="companyId"),
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db)
):
    """List clients, optionally for one company"""
    return ClientService(db).get_all(company_id, include_inactive)


@router.get("/{client_id}", response_model=ClientResponse, dependencies=[Depends(PermissionChecker("clients", "read"))])
async def get_client(
    client_id: int,
    db: Session = Depends(get_db)
):
    return ClientService(db).get_or_404(client_id)


@router.get(
    "/{client_id}/banks",
    response_model=List[BankAccountResponse],
    dependencies=[Depends(PermissionChecker("bank_accounts", "read"))]
)
async def get_client_banks(
    client_id: int,
    db: Session = Depends(get_db)
):
    """Bank accounts mapped to the client, in display order"""
    return ClientService(db).get_bank_accounts(client_id)


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PermissionChecker("clients", "create"))]
)
async def create_client(
    client_data: ClientCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    client = ClientService(db).create(client_data)
    AuditService(db).log(
        action=AuditAction.CREATE,
        resource_type="Client",
        resource_id=client.id,
        description=f"Client '{client.name}' created",
        user=current_user,
        request=request
    )
    db.commit()
    db.refresh(client)
    return client


@router.put("/{client_id}", response_model=ClientResponse, dependencies=[Depends(PermissionChecker("clients", "update"))])
async def update_client(
    client_id: int,
    client_data: ClientUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    client = ClientService(db).update(client_id, client_data)
    AuditService(db).log(
        action=AuditAction.UPDATE,
        resource_type="Client",
        resource_id=client.id,
        description=f"Client '{client.name}' updated",
        user=current_user,
        request=request,
        new_values=client_data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(client)
    return client


@router.delete("/{client_id}", response_model=MessageResponse, dependencies=[Depends(PermissionChecker("clients", "delete"))])
async def delete_client(
    client_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Deactivate a client; its invoices and number sequence are kept"""
    client = ClientService(db).delete(client_id)
    AuditService(db).log(
        action=AuditAction.DELETE,
        resource_type="Client",
        resource_id=client.id,
        description=f"Client '{client.name}' deactivated",
        user=current_user,
        request=request
    )
    db.commit()
    return {"message": "Client deleted successfully"}
