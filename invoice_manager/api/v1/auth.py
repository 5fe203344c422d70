"""
Authentication API Routes
"""
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from invoice_manager.core.database import get_db
from invoice_manager.core.exceptions import AuthenticationError
from invoice_manager.core.security import create_access_token, get_current_user
from invoice_manager.schemas import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from invoice_manager.services.user_service import UserService
from invoice_manager.services.audit_service import AuditService, AuditAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Exchange username and password for a bearer token"""
    user_service = UserService(db)
    audit_service = AuditService(db)

    user = user_service.authenticate(login_data.username, login_data.password)
    if not user:
        logger.warning(f"Failed login attempt for username '{login_data.username}'")
        audit_service.log(
            action=AuditAction.LOGIN_FAILED,
            resource_type="User",
            description=f"Failed login for '{login_data.username}'",
            request=request,
            status="failure",
            error_message="Invalid credentials"
        )
        db.commit()
        raise AuthenticationError("Invalid username or password")

    audit_service.log(
        action=AuditAction.LOGIN,
        resource_type="User",
        resource_id=user.id,
        description=f"User '{user.username}' logged in",
        user=user,
        request=request
    )
    db.commit()

    return LoginResponse(
        token=create_access_token(user),
        user_id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role,
        email=user.email
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Create a new user account"""
    user = UserService(db).create(register_data)

    AuditService(db).log(
        action=AuditAction.USER_CREATED,
        resource_type="User",
        resource_id=user.id,
        description=f"User '{user.username}' registered",
        user=user,
        request=request,
        new_values={"username": user.username, "email": user.email, "role": user.role}
    )
    db.commit()
    db.refresh(user)
    return user


@router.get("/me", response_model=UserResponse)
async def get_me(current_user=Depends(get_current_user)):
    return current_user
