"""
Report Service - Revenue and status analytics over invoices
"""
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func
from decimal import Decimal
from datetime import date

from invoice_manager.models import Invoice, Client, InvoiceStatus

PAID = InvoiceStatus.PAID.value


def months_back(today: date, months: int) -> date:
    """First day of the month ``months - 1`` months before ``today``'s month."""
    index = today.year * 12 + (today.month - 1) - (months - 1)
    return date(index // 12, index % 12 + 1, 1)


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        query,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        paid_only: bool = True
    ):
        if paid_only:
            query = query.filter(Invoice.status == PAID)
        if company_id is not None:
            query = query.filter(Invoice.company_id == company_id)
        if start_date:
            query = query.filter(Invoice.invoice_date >= start_date)
        if end_date:
            query = query.filter(Invoice.invoice_date <= end_date)
        return query

    def revenue_by_currency(
        self,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict]:
        """Paid revenue per currency; currencies are never converted or mixed"""
        query = self.db.query(
            Invoice.currency,
            func.sum(Invoice.total_amount).label("total"),
            func.count(Invoice.id).label("count")
        )
        rows = self._filtered(query, company_id, start_date, end_date)\
            .group_by(Invoice.currency)\
            .order_by(Invoice.currency)\
            .all()

        return [
            {
                "currency": row.currency,
                "total_revenue": Decimal(str(row.total or 0)),
                "invoice_count": row.count,
            }
            for row in rows
        ]

    def monthly_revenue(
        self,
        months: int = 12,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict]:
        if start_date is None:
            start_date = months_back(date.today(), months)

        year = func.extract("year", Invoice.invoice_date)
        month = func.extract("month", Invoice.invoice_date)

        query = self.db.query(
            year.label("year"),
            month.label("month"),
            Invoice.currency,
            func.sum(Invoice.total_amount).label("total"),
            func.count(Invoice.id).label("count")
        )
        rows = self._filtered(query, company_id, start_date, end_date)\
            .group_by(year, month, Invoice.currency)\
            .order_by(year, month, Invoice.currency)\
            .all()

        return [
            {
                "year": int(row.year),
                "month": int(row.month),
                "currency": row.currency,
                "total_revenue": Decimal(str(row.total or 0)),
                "invoice_count": row.count,
            }
            for row in rows
        ]

    def sales_by_client(
        self,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict]:
        total = func.sum(Invoice.total_amount)
        query = self.db.query(
            Client.id.label("client_id"),
            Client.name.label("client_name"),
            Invoice.currency,
            total.label("total"),
            func.count(Invoice.id).label("count")
        ).select_from(Invoice).join(Client, Client.id == Invoice.client_id)

        rows = self._filtered(query, company_id, start_date, end_date)\
            .group_by(Client.id, Client.name, Invoice.currency)\
            .order_by(total.desc(), Client.name)\
            .all()

        return [
            {
                "client_id": row.client_id,
                "client_name": row.client_name,
                "currency": row.currency,
                "total_sales": Decimal(str(row.total or 0)),
                "invoice_count": row.count,
            }
            for row in rows
        ]

    def status_summary(
        self,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict]:
        """Counts and amounts for every status, not just Paid"""
        query = self.db.query(
            Invoice.status,
            Invoice.currency,
            func.count(Invoice.id).label("count"),
            func.sum(Invoice.total_amount).label("total")
        )
        rows = self._filtered(query, company_id, start_date, end_date, paid_only=False)\
            .group_by(Invoice.status, Invoice.currency)\
            .order_by(Invoice.status, Invoice.currency)\
            .all()

        return [
            {
                "status": row.status,
                "currency": row.currency,
                "invoice_count": row.count,
                "total_amount": Decimal(str(row.total or 0)),
            }
            for row in rows
        ]

    def top_clients(
        self,
        top: int = 10,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict]:
        total = func.sum(Invoice.total_amount)
        query = self.db.query(
            Client.id.label("client_id"),
            Client.name.label("client_name"),
            total.label("total"),
            func.count(Invoice.id).label("count")
        ).select_from(Invoice).join(Client, Client.id == Invoice.client_id)

        rows = self._filtered(query, company_id, start_date, end_date)\
            .group_by(Client.id, Client.name)\
            .order_by(total.desc(), Client.name)\
            .limit(top)\
            .all()

        return [
            {
                "client_id": row.client_id,
                "client_name": row.client_name,
                "total_sales": Decimal(str(row.total or 0)),
                "invoice_count": row.count,
            }
            for row in rows
        ]

    def dashboard(self, company_id: Optional[int] = None) -> Dict:
        query = self.db.query(Invoice.status, func.count(Invoice.id))
        if company_id is not None:
            query = query.filter(Invoice.company_id == company_id)
        counts = dict(query.group_by(Invoice.status).all())

        status_counts = {status.value: counts.get(status.value, 0) for status in InvoiceStatus}

        return {
            "total_invoices": sum(status_counts.values()),
            "status_counts": status_counts,
            "revenue_by_currency": self.revenue_by_currency(company_id=company_id),
            "monthly_revenue": self.monthly_revenue(months=12, company_id=company_id),
        }
