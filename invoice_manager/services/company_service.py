"""
Company Service - Business Logic for Issuing Companies
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from invoice_manager.core.exceptions import NotFoundError
from invoice_manager.models import Company
from invoice_manager.schemas import CompanyCreate, CompanyUpdate


class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, company_id: int) -> Optional[Company]:
        return self.db.query(Company).filter(Company.id == company_id).first()

    def get_or_404(self, company_id: int) -> Company:
        company = self.get_by_id(company_id)
        if not company:
            raise NotFoundError(f"Company {company_id} not found")
        return company

    def get_all(self, include_inactive: bool = False) -> List[Company]:
        query = self.db.query(Company)
        if not include_inactive:
            query = query.filter(Company.is_active == True)
        return query.order_by(Company.name).all()

    def create(self, company_data: CompanyCreate) -> Company:
        company = Company(**company_data.model_dump())
        self.db.add(company)
        self.db.flush()
        return company

    def update(self, company_id: int, company_data: CompanyUpdate) -> Company:
        company = self.get_or_404(company_id)

        update_data = company_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if value is None and key in ("name", "is_active"):
                continue
            setattr(company, key, value)

        self.db.flush()
        return company

    def delete(self, company_id: int) -> Company:
        company = self.get_or_404(company_id)
        company.is_active = False
        self.db.flush()
        return company
