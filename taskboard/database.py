from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from taskboard.config import settings


def async_url(url: str) -> str:
    """Map plain driver URLs onto their async drivers (asyncpg, aiosqlite)."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


SQLALCHEMY_DATABASE_URL = async_url(settings.database_url)

engine_options = {"echo": settings.DB_ECHO}
if not SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # Server connections can be dropped between requests
    engine_options["pool_pre_ping"] = True

engine = create_async_engine(SQLALCHEMY_DATABASE_URL, **engine_options)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

Base = declarative_base()

async def get_db():
    """One session per request; routers commit explicitly, anything left open is rolled back."""
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise
