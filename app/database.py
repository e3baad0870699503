from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from app.config import settings
import ssl
from urllib.parse import urlparse, urlunparse
from app.utils.logger import logger

database_url = settings.DATABASE_URL

# Validate DATABASE_URL is set and not empty
if not database_url or not database_url.strip():
    raise ValueError("DATABASE_URL environment variable is not set or is empty.")

if database_url.startswith("postgresql://"):
    database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

if not database_url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
    raise ValueError(
        f"Invalid DATABASE_URL format. Must start with 'postgresql://', 'postgresql+asyncpg://' "
        f"or 'sqlite+aiosqlite://'. Got: {database_url[:50]}..."
    )

is_sqlite = database_url.startswith("sqlite")

if is_sqlite:
    clean_url = database_url
    logger.info(f"Using SQLite database: {clean_url}")
else:
    logger.info(f"Using DATABASE_URL: {database_url.split('@')[1] if '@' in database_url else '***'}")  # Log host only for security

    # asyncpg doesn't understand sslmode and friends in the query string
    if '?' in database_url:
        logger.warning("Removed query parameters from DATABASE_URL")
    parsed = urlparse(database_url.split('?')[0])
    clean_url = urlunparse((
        parsed.scheme,
        parsed.netloc,
        parsed.path,
        parsed.params,
        '',
        parsed.fragment
    ))

connect_args = {}
if not is_sqlite:
    connect_args = {
        "server_settings": {
            "application_name": "udyam_backend"
        },
        "command_timeout": 60,
        "timeout": 90,
        "statement_cache_size": 0,  # pgbouncer transaction mode
    }

    # Managed Postgres poolers need SSL without certificate verification
    if "pooler" in clean_url.lower() or "sslmode=require" in settings.DATABASE_URL:
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context
        logger.info("SSL enabled (no cert verification) for database connection")

engine = create_async_engine(
    clean_url,
    echo=settings.APP_DEBUG and settings.APP_ENV == "development",
    poolclass=NullPool,
    connect_args=connect_args
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """
    Yield a database session; rolls back if the request raised.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
