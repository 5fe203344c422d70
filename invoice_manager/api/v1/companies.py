"""
Company API Routes
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List

from invoice_manager.core.database import get_db
from invoice_manager.core.security import get_current_user, PermissionChecker
from invoice_manager.schemas import CompanyCreate, CompanyUpdate, CompanyResponse, MessageResponse
from invoice_manager.services.company_service import CompanyService
from invoice_manager.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=List[CompanyResponse], dependencies=[Depends(PermissionChecker("companies", "read"))])
async def list_companies(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db)
):
    return CompanyService(db).get_all(include_inactive)


@router.get("/{company_id}", response_model=CompanyResponse, dependencies=[Depends(PermissionChecker("companies", "read"))])
async def get_company(
    company_id: int,
    db: Session = Depends(get_db)
):
    return CompanyService(db).get_or_404(company_id)


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PermissionChecker("companies", "create"))]
)
async def create_company(
    company_data: CompanyCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    company = CompanyService(db).create(company_data)
    AuditService(db).log(
        action=AuditAction.CREATE,
        resource_type="Company",
        resource_id=company.id,
        description=f"Company '{company.name}' created",
        user=current_user,
        request=request
    )
    db.commit()
    db.refresh(company)
    return company


@router.put("/{company_id}", response_model=CompanyResponse, dependencies=[Depends(PermissionChecker("companies", "update"))])
async def update_company(
    company_id: int,
    company_data: CompanyUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    company = CompanyService(db).update(company_id, company_data)
    AuditService(db).log(
        action=AuditAction.UPDATE,
        resource_type="Company",
        resource_id=company.id,
        description=f"Company '{company.name}' updated",
        user=current_user,
        request=request,
        new_values=company_data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(company)
    return company


@router.delete("/{company_id}", response_model=MessageResponse, dependencies=[Depends(PermissionChecker("companies", "delete"))])
async def delete_company(
    company_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Deactivate a company"""
    company = CompanyService(db).delete(company_id)
    AuditService(db).log(
        action=AuditAction.DELETE,
        resource_type="Company",
        resource_id=company.id,
        description=f"Company '{company.name}' deactivated",
        user=current_user,
        request=request
    )
    db.commit()
    return {"message": "Company deleted successfully"}
