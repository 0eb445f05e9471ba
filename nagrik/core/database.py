from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from nagrik.core.config import settings

# SQLAlchemy Base
Base = declarative_base()

# Async Engine
async_engine = create_async_engine(
    settings.ASYNC_DATABASE_URL,
    echo=settings.DEBUG,
    future=True,
)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Async session factory bound to the given engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Async Session Factory
AsyncSessionLocal = build_session_factory(async_engine)


async def init_db(engine: AsyncEngine = async_engine):
    """Initialize database tables"""
    async with engine.begin() as conn:
        # Import all models here to ensure they are registered
        from nagrik.models import Complaint, StatusUpdate, Notification  # noqa: F401

        # Create all tables if they don't exist
        await conn.run_sync(Base.metadata.create_all)
