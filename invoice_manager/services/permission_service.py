"""
Permission Service - role based access policy
"""
from invoice_manager.core.exceptions import AuthorizationError
from invoice_manager.models import UserRole

ADMIN = UserRole.ADMIN.value
CREATOR = UserRole.INVOICE_CREATOR.value
VIEWER = UserRole.VIEW_ONLY.value

ANY_ROLE = frozenset({ADMIN, CREATOR, VIEWER})
ADMIN_ONLY = frozenset({ADMIN})
EDITORS = frozenset({ADMIN, CREATOR})

POLICY = {
    ("users", "read"): ANY_ROLE,
    ("users", "list"): ADMIN_ONLY,
    ("users", "create"): ADMIN_ONLY,
    ("users", "update"): ADMIN_ONLY,
    ("users", "delete"): ADMIN_ONLY,

    ("companies", "read"): ANY_ROLE,
    ("companies", "create"): ADMIN_ONLY,
    ("companies", "update"): ADMIN_ONLY,
    ("companies", "delete"): ADMIN_ONLY,

    ("clients", "read"): ANY_ROLE,
    ("clients", "create"): EDITORS,
    ("clients", "update"): EDITORS,
    ("clients", "delete"): EDITORS,

    ("bank_accounts", "read"): ANY_ROLE,
    ("bank_accounts", "create"): ADMIN_ONLY,
    ("bank_accounts", "update"): ADMIN_ONLY,
    ("bank_accounts", "delete"): ADMIN_ONLY,
    ("bank_accounts", "map_client"): EDITORS,
    ("bank_accounts", "unmap_client"): EDITORS,

    ("invoices", "read"): ANY_ROLE,
    ("invoices", "create"): EDITORS,
    ("invoices", "update"): EDITORS,
    ("invoices", "delete"): EDITORS,
    ("invoices", "generate_number"): EDITORS,
    ("invoices", "history"): ADMIN_ONLY,

    ("reports", "read"): ANY_ROLE,
}


def is_allowed(role: str, resource: str, action: str) -> bool:
    """Unknown (resource, action) pairs are denied."""
    return role in POLICY.get((resource, action), frozenset())


def require_permission(user, resource: str, action: str) -> None:
    if not is_allowed(user.role, resource, action):
        raise AuthorizationError(
            f"Role '{user.role}' is not permitted to {action} {resource}"
        )
