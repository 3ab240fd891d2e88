# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy async engine factory and the ``members`` table definition."""
from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from member_service.core.config import settings

metadata = MetaData()

members_table = Table(
    "members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("address", String(500), nullable=False, server_default=""),
    Column("phone", String(50), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("upline_id", Integer, ForeignKey("members.id"), nullable=True, index=True),
)


def build_engine(url: str | None = None) -> AsyncEngine:
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_async_engine(url)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=settings.POOL_RECYCLE,
    )
