#!/usr/bin/env python3
"""
Seed the database with the default upper/lower program.
Pass --reset to drop all tables first (local development only).
"""

import asyncio
import os
import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Set default environment variables for local development
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./local_dev.db")
os.environ.setdefault("SESSION_SECRET", "local-dev-secret")

from iron_log.db import repo
from iron_log.db.models import Base
from iron_log.db.seed import seed_database


async def main(reset: bool) -> None:
    await repo.init_db()
    engine = repo._engine
    if not engine:
        print("❌ Failed to initialize database engine")
        return

    if reset:
        async with engine.begin() as conn:
            print("🗑️  Dropping all tables...")
            await conn.run_sync(Base.metadata.drop_all)
            print("🏗️  Creating tables from models...")
            await conn.run_sync(Base.metadata.create_all)

    created = await seed_database()
    print(f"✅ Seed complete: {created} workout(s) created")
    await repo.close_db()


if __name__ == "__main__":
    asyncio.run(main(reset="--reset" in sys.argv[1:]))
