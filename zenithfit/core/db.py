from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from zenithfit.core.config import settings


def async_database_url(url: str) -> str:
    """Point plain postgres URLs (as most hosts hand them out) at the asyncpg driver."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


engine = create_async_engine(
    async_database_url(settings.DATABASE_URL),
    echo=settings.SQL_ECHO,
    pool_size=settings.DB_POOL_SIZE,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
