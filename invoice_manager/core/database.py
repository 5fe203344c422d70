"""
Database Configuration
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

from invoice_manager.core.config import settings


def create_db_engine(url: str):
    """
    Create an engine for ``url``.

    SQLite gets foreign key enforcement. In-memory databases share one
    connection. File databases take the write lock when a transaction begins,
    so concurrent writers wait on the busy timeout instead of deadlocking.
    """
    engine_kwargs = {"echo": settings.DEBUG}
    in_memory = url in ("sqlite://", "sqlite:///:memory:")
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if in_memory:
            engine_kwargs["poolclass"] = StaticPool

    db_engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(db_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            # SQLite ignores ON DELETE rules unless this pragma is on
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            if not in_memory:
                # Transactions are begun explicitly below
                dbapi_connection.isolation_level = None

        if not in_memory:
            @event.listens_for(db_engine, "begin")
            def _on_begin(conn):
                conn.exec_driver_sql("BEGIN IMMEDIATE")

    return db_engine


# Create engine
engine = create_db_engine(settings.database_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base model
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures the session is closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables"""
    # Import all models to register them with Base
    from invoice_manager.models import (  # noqa: F401
        User, Company, Client, BankAccount, ClientBankMapping,
        Invoice, InvoiceItem, InvoiceBankDetail, AuditLog
    )
    Base.metadata.create_all(bind=engine)
