# API v1 Package
from invoice_manager.api.v1 import auth, users, companies, clients, bank_accounts, invoices, reports

__all__ = [
    'auth',
    'users',
    'companies',
    'clients',
    'bank_accounts',
    'invoices',
    'reports',
]
