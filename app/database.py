# app/database.py

from functools import lru_cache

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

from app.core.config import get_settings

Base = declarative_base()


@lru_cache()
def get_engine():
    """Build the async engine on first use; the audit table is optional"""
    database_url = get_settings().async_database_url
    if not database_url:
        raise ValueError("DATABASE_URL is not set in environment variables")

    return create_async_engine(
        database_url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800
    )


@lru_cache()
def get_sessionmaker() -> async_sessionmaker:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False
    )
