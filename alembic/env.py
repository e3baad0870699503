from logging.config import fileConfig
from alembic import context
import asyncio
from app.database import Base, engine, clean_url

# Import all models to ensure they're registered with Base.metadata
from app.models import (  # noqa: F401
    Seller, SellerSupportTicket, Verification, VerificationHistory,
    Admin, AdminActivity, OtpChallenge, Product,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=clean_url.startswith("sqlite"),
        **kwargs
    )


def run_migrations_offline() -> None:
    _configure(
        url=clean_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    _configure(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    # Same async engine (and SSL settings) the application uses
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
