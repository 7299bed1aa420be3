"""Database engine, session factory, and the declarative base.

All FireCert tables live in one schema:
  - users, establishments, applications
  - inspections, inspection_checklists, activity_logs

Session dependency for FastAPI:
  - get_db()  → one session per request, committed on success,
                rolled back if the handler raises
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from firecert.config import settings

# SQLite (tests, local runs) uses a static pool that takes no sizing args
_pool_kwargs = (
    {} if settings.database_url.startswith("sqlite")
    else {"pool_size": 20, "max_overflow": 10}
)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_pool_kwargs,
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Yield a request-scoped session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
