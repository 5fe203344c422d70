"""
Invoice Number Service - per-client sequential invoice numbers
"""
from datetime import date
from typing import Optional
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from invoice_manager.core.exceptions import NotFoundError
from invoice_manager.models import Client

logger = logging.getLogger(__name__)


def format_invoice_number(fmt: str, number: int, today: Optional[date] = None) -> str:
    """
    Render an invoice number format.

    Tokens: ``{YYYY}`` year, ``{MM}`` month, ``{####}`` counter padded to 4,
    ``{###}`` counter padded to 3. Wider counters are not truncated.
    """
    today = today or date.today()
    result = fmt.replace("{YYYY}", f"{today.year:04d}")
    result = result.replace("{MM}", f"{today.month:02d}")
    result = result.replace("{####}", f"{number:04d}")
    result = result.replace("{###}", f"{number:03d}")
    return result


class InvoiceNumberService:
    def __init__(self, db: Session):
        self.db = db

    def next_invoice_number(self, client_id: int, today: Optional[date] = None) -> str:
        """
        Consume the next number for a client.

        The counter is bumped with a single UPDATE, then re-read under a row
        lock, all inside the caller's transaction. Committing is left to the
        caller so a failed invoice insert rolls the counter back.
        """
        result = self.db.execute(
            update(Client)
            .where(Client.id == client_id)
            .values(last_invoice_number=Client.last_invoice_number + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"Client {client_id} not found")

        client = self.db.query(Client)\
            .filter(Client.id == client_id)\
            .with_for_update()\
            .populate_existing()\
            .one()

        number = format_invoice_number(
            client.invoice_number_format, client.last_invoice_number, today
        )
        logger.info(f"Generated invoice number {number} for client {client_id}")
        return number
