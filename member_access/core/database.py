# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine singleton and table definitions."""
from sqlalchemy import (
    Column, DateTime, Integer, MetaData, String, Table, UniqueConstraint, create_engine,
)
from sqlalchemy.engine import Engine

from member_access.core.config import settings

metadata = MetaData()

members = Table(
    "members", metadata,
    Column("id", String(36), primary_key=True),
    Column("full_name", String(255), nullable=False),
    Column("dni", String(32), nullable=False),
    UniqueConstraint("dni", name="uq_members_dni"),
)

access_log = Table(
    "access_log", metadata,
    Column("id", String(36), primary_key=True),
    Column("dni", String(32), nullable=False, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False, index=True),
)

parking = Table(
    "parking", metadata,
    Column("id", Integer, primary_key=True),
    Column("total", Integer, nullable=False),
    Column("occupied", Integer, nullable=False),
)


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


def create_tables(bind: Engine) -> None:
    metadata.create_all(bind)


engine = build_engine(settings.DATABASE_URL)
