"""
User Service - Business Logic for User Operations
"""
from datetime import datetime
from typing import Optional, List
from sqlalchemy.orm import Session

from invoice_manager.core.exceptions import DuplicateError, NotFoundError
from invoice_manager.core.security import get_password_hash, verify_password
from invoice_manager.models import User
from invoice_manager.schemas import UserCreate, UserUpdate


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_or_404(self, user_id: int) -> User:
        user = self.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_all(self, include_inactive: bool = False) -> List[User]:
        query = self.db.query(User)
        if not include_inactive:
            query = query.filter(User.is_active == True)
        return query.order_by(User.username).all()

    def create(self, user_data: UserCreate) -> User:
        if self.get_by_username(user_data.username):
            raise DuplicateError(f"Username '{user_data.username}' is already taken")
        if self.get_by_email(user_data.email):
            raise DuplicateError(f"Email '{user_data.email}' is already registered")

        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            role=user_data.role.value,
            is_active=getattr(user_data, "is_active", True)
        )
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user_id: int, user_data: UserUpdate) -> User:
        user = self.get_or_404(user_id)

        update_data = user_data.model_dump(exclude_unset=True)
        password = update_data.pop("password", None)

        email = update_data.get("email")
        if email and email != user.email:
            existing = self.get_by_email(email)
            if existing and existing.id != user.id:
                raise DuplicateError(f"Email '{email}' is already registered")

        if update_data.get("role") is not None:
            update_data["role"] = update_data["role"].value

        for key, value in update_data.items():
            if value is not None:
                setattr(user, key, value)

        if password:
            user.hashed_password = get_password_hash(password)

        self.db.flush()
        return user

    def delete(self, user_id: int) -> User:
        """Soft delete: the user can no longer log in but history keeps its rows."""
        user = self.get_or_404(user_id)
        user.is_active = False
        self.db.flush()
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user for valid credentials of an active account, else None."""
        user = self.get_by_username(username)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        user.last_login = datetime.utcnow()
        self.db.flush()
        return user
