"""
Audit Logging Service
Records who changed what, in the same transaction as the change
"""
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import Optional, List, Dict
import json
import logging

from invoice_manager.models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """Constants for audit actions"""
    # Authentication
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"

    # User Management
    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"

    # CRUD Operations
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    # Invoicing
    NUMBER_GENERATED = "NUMBER_GENERATED"
    STATUS_CHANGED = "STATUS_CHANGED"


def _to_json(values: Optional[Dict]) -> Optional[str]:
    if not values:
        return None
    try:
        return json.dumps(values, default=str)
    except (TypeError, ValueError) as e:
        logger.error(f"Could not serialize audit values: {e}")
        return None


class AuditService:
    """Service for recording and retrieving audit logs"""

    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id: Optional[int] = None,
        description: Optional[str] = None,
        old_values: Optional[Dict] = None,
        new_values: Optional[Dict] = None,
        user=None,
        request=None,
        status: str = "success",
        error_message: Optional[str] = None
    ) -> AuditLog:
        """
        Create an audit log entry.

        Args:
            action: The action being performed (use AuditAction constants)
            resource_type: Type of resource being affected (e.g., 'Invoice', 'Client')
            resource_id: ID of the affected resource
            description: Human-readable description of the action
            old_values: Dictionary of values before the change (for updates)
            new_values: Dictionary of values after the change
            user: The acting User, if known
            request: The incoming request, for client and path details
            status: 'success', 'failure', or 'error'
            error_message: Error message if status is not success

        The row is flushed, not committed; it lands with the caller's commit.
        """
        audit_log = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            description=description,
            old_values=_to_json(old_values),
            new_values=_to_json(new_values),
            user_id=user.id if user is not None else None,
            username=user.username if user is not None else None,
            status=status,
            error_message=error_message
        )

        if request is not None:
            audit_log.ip_address = request.client.host if request.client else None
            audit_log.user_agent = (request.headers.get("user-agent") or "")[:500] or None
            audit_log.request_method = request.method
            audit_log.request_path = request.url.path

        self.db.add(audit_log)
        self.db.flush()

        logger.info(
            f"Audit: {action} {resource_type}(id={resource_id}) "
            f"by user={audit_log.username} status={status}"
        )

        return audit_log

    def get_by_resource(
        self,
        resource_type: str,
        resource_id: int,
        limit: int = 50
    ) -> List[AuditLog]:
        """Get audit history for a specific resource, newest first"""
        return self.db.query(AuditLog).filter(
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == resource_id
        ).order_by(desc(AuditLog.timestamp), desc(AuditLog.id)).limit(limit).all()

