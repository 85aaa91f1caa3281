#!/usr/bin/env python
"""
Create or reset a dashboard administrator.

Stores a PBKDF2 hash of the password; the report export checks against it.

Usage:
    python scripts/create_admin.py admin@example.com
    python scripts/create_admin.py admin@example.com --create-tables
"""

import argparse
import asyncio
import getpass

import structlog
from sqlalchemy import select

from marketplace_reports.config.logging import configure_logging
from marketplace_reports.database.connection import close_database, get_db, get_engine, init_database
from marketplace_reports.database.models import Admin, Base
from marketplace_reports.reporting.credentials import hash_password

logger = structlog.get_logger(__name__)


async def upsert_admin(email: str, password: str, create_tables: bool = False) -> None:
    await init_database()
    try:
        if create_tables:
            async with get_engine().begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created")

        async with get_db() as db:
            result = await db.execute(select(Admin).where(Admin.email == email))
            admin = result.scalar_one_or_none()
            if admin is None:
                db.add(Admin(email=email, password_hash=hash_password(password)))
                logger.info("Admin created", email=email)
            else:
                admin.password_hash = hash_password(password)
                logger.info("Admin password reset", email=email)
    finally:
        await close_database()


def main():
    parser = argparse.ArgumentParser(description="Create or reset a dashboard administrator")
    parser.add_argument("email", help="Admin email")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        parser.error("Passwords do not match")
    if not password:
        parser.error("Password must not be empty")

    configure_logging()
    asyncio.run(upsert_admin(args.email, password, create_tables=args.create_tables))


if __name__ == "__main__":
    main()
