"""
User Management API Routes
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List

from invoice_manager.core.database import get_db
from invoice_manager.core.security import get_current_user, PermissionChecker
from invoice_manager.schemas import UserCreate, UserUpdate, UserResponse, MessageResponse
from invoice_manager.services.user_service import UserService
from invoice_manager.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse], dependencies=[Depends(PermissionChecker("users", "list"))])
async def list_users(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db)
):
    """List users (Admin only)"""
    return UserService(db).get_all(include_inactive)


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(PermissionChecker("users", "read"))])
async def get_user(
    user_id: int,
    db: Session = Depends(get_db)
):
    return UserService(db).get_or_404(user_id)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PermissionChecker("users", "create"))]
)
async def create_user(
    user_data: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Create a user with any role"""
    user = UserService(db).create(user_data)
    AuditService(db).log(
        action=AuditAction.USER_CREATED,
        resource_type="User",
        resource_id=user.id,
        description=f"User '{user.username}' created by '{current_user.username}'",
        user=current_user,
        request=request,
        new_values={"username": user.username, "email": user.email, "role": user.role}
    )
    db.commit()
    db.refresh(user)
    return user


@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(PermissionChecker("users", "update"))])
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Update a user; a password in the body replaces the current one"""
    user_service = UserService(db)
    user = user_service.get_or_404(user_id)
    old_values = {"email": user.email, "full_name": user.full_name, "role": user.role, "is_active": user.is_active}

    user = user_service.update(user_id, user_data)

    changed = sorted(user_data.model_dump(exclude_unset=True).keys())
    AuditService(db).log(
        action=AuditAction.USER_UPDATED,
        resource_type="User",
        resource_id=user.id,
        description=f"User '{user.username}' updated: {', '.join(changed)}",
        user=current_user,
        request=request,
        old_values=old_values,
        new_values={"email": user.email, "full_name": user.full_name, "role": user.role, "is_active": user.is_active}
    )
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(PermissionChecker("users", "delete"))])
async def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Deactivate a user"""
    user = UserService(db).delete(user_id)
    AuditService(db).log(
        action=AuditAction.USER_DELETED,
        resource_type="User",
        resource_id=user.id,
        description=f"User '{user.username}' deactivated",
        user=current_user,
        request=request
    )
    db.commit()
    return {"message": "User deleted successfully"}
