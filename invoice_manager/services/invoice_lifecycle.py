"""
Invoice status transitions
"""
from invoice_manager.core.config import settings
from invoice_manager.core.exceptions import InvalidTransitionError, ValidationError
from invoice_manager.models import InvoiceStatus

ALLOWED_TRANSITIONS = {
    InvoiceStatus.DRAFT.value: {InvoiceStatus.SENT.value, InvoiceStatus.CANCELLED.value},
    InvoiceStatus.SENT.value: {InvoiceStatus.PAID.value, InvoiceStatus.CANCELLED.value},
    InvoiceStatus.PAID.value: set(),
    InvoiceStatus.CANCELLED.value: set(),
}

INITIAL_STATUSES = {InvoiceStatus.DRAFT.value, InvoiceStatus.SENT.value}


def can_transition(current: str, requested: str) -> bool:
    if current == requested:
        return True
    return requested in ALLOWED_TRANSITIONS.get(current, set())


def check_transition(current: str, requested: str, enforce: bool = None) -> None:
    """Raise InvalidTransitionError unless ``current -> requested`` is legal."""
    if enforce is None:
        enforce = settings.ENFORCE_STATUS_TRANSITIONS
    if requested not in ALLOWED_TRANSITIONS:
        raise ValidationError(f"Unknown invoice status '{requested}'")
    if enforce and not can_transition(current, requested):
        raise InvalidTransitionError(current, requested)


def check_initial_status(status: str, enforce: bool = None) -> None:
    if enforce is None:
        enforce = settings.ENFORCE_STATUS_TRANSITIONS
    if status not in ALLOWED_TRANSITIONS:
        raise ValidationError(f"Unknown invoice status '{status}'")
    if enforce and status not in INITIAL_STATUSES:
        raise ValidationError(f"New invoices must be Draft or Sent, not '{status}'")
