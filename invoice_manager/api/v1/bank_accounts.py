"""
Bank Account API Routes - accounts and client mappings
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from invoice_manager.core.database import get_db
from invoice_manager.core.security import get_current_user, PermissionChecker
from invoice_manager.schemas import (
    BankAccountCreate, BankAccountUpdate, BankAccountResponse,
    ClientBankMappingCreate, ClientBankMappingResponse, MessageResponse
)
from invoice_manager.services.banking_service import BankAccountService, ClientBankMappingService
from invoice_manager.services.client_service import ClientService
from invoice_manager.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/bankaccounts", tags=["Bank Accounts"])


# ==================== CLIENT MAPPINGS ====================

@router.post(
    "/client-mapping",
    response_model=ClientBankMappingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PermissionChecker("bank_accounts", "map_client"))]
)
async def map_client_bank_account(
    mapping_data: ClientBankMappingCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Attach a bank account to a client"""
    mapping = ClientBankMappingService(db).create(mapping_data)
    AuditService(db).log(
        action=AuditAction.CREATE,
        resource_type="ClientBankMapping",
        resource_id=mapping.id,
        description=f"Bank account {mapping.bank_account_id} mapped to client {mapping.client_id}",
        user=current_user,
        request=request
    )
    db.commit()
    db.refresh(mapping)
    return mapping


@router.delete(
    "/client-mapping/{mapping_id}",
    response_model=MessageResponse,
    dependencies=[Depends(PermissionChecker("bank_accounts", "unmap_client"))]
)
async def unmap_client_bank_account(
    mapping_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    mapping = ClientBankMappingService(db).delete(mapping_id)
    AuditService(db).log(
        action=AuditAction.DELETE,
        resource_type="ClientBankMapping",
        resource_id=mapping_id,
        description=f"Bank account {mapping.bank_account_id} unmapped from client {mapping.client_id}",
        user=current_user,
        request=request
    )
    db.commit()
    return {"message": "Mapping deleted successfully"}


@router.get(
    "/by-client/{client_id}",
    response_model=List[ClientBankMappingResponse],
    dependencies=[Depends(PermissionChecker("bank_accounts", "read"))]
)
async def list_client_mappings(
    client_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db)
):
    """Mappings of one client, in display order"""
    ClientService(db).get_or_404(client_id)
    return ClientBankMappingService(db).get_by_client(client_id, include_inactive)


# ==================== BANK ACCOUNTS ====================

@router.get("", response_model=List[BankAccountResponse], dependencies=[Depends(PermissionChecker("bank_accounts", "read"))])
async def list_bank_accounts(
    company_id: Optional[int] = Query(None, alias="companyId"),
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db)
):
    return BankAccountService(db).get_all(company_id, include_inactive)


@router.get("/{account_id}", response_model=BankAccountResponse, dependencies=[Depends(PermissionChecker("bank_accounts", "read"))])
async def get_bank_account(
    account_id: int,
    db: Session = Depends(get_db)
):
    return BankAccountService(db).get_or_404(account_id)


@router.post(
    "",
    response_model=BankAccountResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PermissionChecker("bank_accounts", "create"))]
)
async def create_bank_account(
    account_data: BankAccountCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    account = BankAccountService(db).create(account_data)
    AuditService(db).log(
        action=AuditAction.CREATE,
        resource_type="BankAccount",
        resource_id=account.id,
        description=f"Bank account '{account.account_name}' at {account.bank_name} created",
        user=current_user,
        request=request
    )
    db.commit()
    db.refresh(account)
    return account


@router.put("/{account_id}", response_model=BankAccountResponse, dependencies=[Depends(PermissionChecker("bank_accounts", "update"))])
async def update_bank_account(
    account_id: int,
    account_data: BankAccountUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    account = BankAccountService(db).update(account_id, account_data)
    AuditService(db).log(
        action=AuditAction.UPDATE,
        resource_type="BankAccount",
        resource_id=account.id,
        description=f"Bank account '{account.account_name}' updated",
        user=current_user,
        request=request,
        new_values=account_data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(account)
    return account


@router.delete("/{account_id}", response_model=MessageResponse, dependencies=[Depends(PermissionChecker("bank_accounts", "delete"))])
async def delete_bank_account(
    account_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Deactivate a bank account"""
    account = BankAccountService(db).delete(account_id)
    AuditService(db).log(
        action=AuditAction.DELETE,
        resource_type="BankAccount",
        resource_id=account.id,
        description=f"Bank account '{account.account_name}' deactivated",
        user=current_user,
        request=request
    )
    db.commit()
    return {"message": "Bank account deleted successfully"}
