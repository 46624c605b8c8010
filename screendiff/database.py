from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from screendiff.config import init_settings
from screendiff.managers.comparison import ComparisonManager

settings = init_settings()

connect_args = {}
if settings.SQLALCHEMY_DATABASE_URI.startswith("postgresql+asyncpg"):
    connect_args = {
        "ssl": "prefer",
        "timeout": 60,
        "server_settings": {
            "application_name": settings.PROJECT_NAME
        }
    }

engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

comparison_manager = ComparisonManager(engine)


async def get_db():
    async with SessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def get_comparison_manager() -> ComparisonManager:
    return comparison_manager
