# Services Package
from invoice_manager.services.user_service import UserService
from invoice_manager.services.company_service import CompanyService
from invoice_manager.services.client_service import ClientService
from invoice_manager.services.banking_service import BankAccountService, ClientBankMappingService
from invoice_manager.services.numbering_service import InvoiceNumberService, format_invoice_number
from invoice_manager.services.invoice_service import InvoiceService
from invoice_manager.services.report_service import ReportService
from invoice_manager.services.audit_service import AuditService, AuditAction

__all__ = [
    'UserService',
    'CompanyService',
    'ClientService',
    'BankAccountService',
    'ClientBankMappingService',
    'InvoiceNumberService',
    'format_invoice_number',
    'InvoiceService',
    'ReportService',
    'AuditService',
    'AuditAction',
]
