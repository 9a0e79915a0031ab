#!/usr/bin/env python3
"""
Create the database tables directly from the models.

Useful for local SQLite databases; deployed databases use the Alembic
revisions in alembic/versions.
"""

import asyncio
import sys

from sqlalchemy.exc import SQLAlchemyError

from streamflow.config import settings
from streamflow.database import engine, init_db


async def create_tables() -> bool:
    print("Creating database tables...")
    print(f"Database URL: {settings.database_url}")

    try:
        await init_db()
    except (SQLAlchemyError, OSError) as e:
        print(f"Error creating tables: {e}")
        return False
    finally:
        await engine.dispose()

    print("Database tables created successfully!")
    return True


if __name__ == "__main__":
    sys.exit(0 if asyncio.run(create_tables()) else 1)
