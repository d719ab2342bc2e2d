"""Alembic env.py — async PostgreSQL migrations for the RuidCar API."""

import asyncio
import sys
import os

# Make 'app' importable when alembic runs from another working directory
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from app.core.config import settings
from app.core.database import Base
from app.models.user import User  # noqa: F401 — ensure models are registered
from app.models.workshop import Workshop  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.lead import Lead, LeadInteraction, LeadStatusHistory  # noqa: F401
from app.models.diagnostic import (  # noqa: F401
    AppointmentSlot, AppointmentException, AppointmentSettings, VehiclePricing, DiagnosticServiceConfig,
)
from app.models.appointment import DiagnosticAppointment  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(url=settings.DATABASE_URL, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
