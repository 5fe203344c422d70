"""
Reports API Routes - paid revenue and invoice status analytics
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from invoice_manager.core.database import get_db
from invoice_manager.core.security import PermissionChecker
from invoice_manager.schemas import (
    ClientSales, MonthlyRevenue, StatusSummary, TopClient, CurrencyRevenue
)
from invoice_manager.services.report_service import ReportService

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(PermissionChecker("reports", "read"))]
)


@router.get("/sales-by-client", response_model=List[ClientSales])
async def get_sales_by_client(
    company_id: Optional[int] = Query(None, alias="companyId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    """Paid totals per client and currency, largest first"""
    return ReportService(db).sales_by_client(company_id, start_date, end_date)


@router.get("/monthly-revenue", response_model=List[MonthlyRevenue])
async def get_monthly_revenue(
    months: int = Query(12, ge=1, le=120),
    company_id: Optional[int] = Query(None, alias="companyId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return ReportService(db).monthly_revenue(months, company_id, start_date, end_date)


@router.get("/status-summary", response_model=List[StatusSummary])
async def get_status_summary(
    company_id: Optional[int] = Query(None, alias="companyId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return ReportService(db).status_summary(company_id, start_date, end_date)


@router.get("/top-clients", response_model=List[TopClient])
async def get_top_clients(
    top: int = Query(10, ge=1, le=100),
    company_id: Optional[int] = Query(None, alias="companyId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return ReportService(db).top_clients(top, company_id, start_date, end_date)


@router.get("/revenue-by-currency", response_model=List[CurrencyRevenue])
async def get_revenue_by_currency(
    company_id: Optional[int] = Query(None, alias="companyId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return ReportService(db).revenue_by_currency(company_id, start_date, end_date)
