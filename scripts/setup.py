#!/usr/bin/env python3
"""Setup script for the aerodemo API."""

import asyncio
import logging
import sys
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from aerodemo.core.database import async_session_factory, close_db
from aerodemo.models import CarouselImage, Pilot
from aerodemo.services.record_store import RecordStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_CAROUSEL = [
    {"url": "/images/formation.jpg", "title": "Formation Flight", "description": "Seven aircraft in diamond formation", "order": 1},
    {"url": "/images/smoke.jpg", "title": "Smoke Trails", "description": "Colored smoke over the runway", "order": 2},
    {"url": "/images/crowd.jpg", "title": "Open Day", "description": "Visitors meeting the squadron", "order": 3},
]

# Positions are the slots in the formation diagram, leader first
SAMPLE_PILOTS = [
    {"name": "Lima", "position": "1", "photo_url": "/images/pilots/lima.jpg", "order": 1},
    {"name": "Costa", "position": "2", "photo_url": "/images/pilots/costa.jpg", "order": 2},
    {"name": "Souza", "position": "3", "photo_url": "/images/pilots/souza.jpg", "order": 3},
]


async def setup_database():
    """Setup the database with initial schema."""
    logger.info("Setting up database...")

    try:
        alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

        logger.info("Running database migrations...")
        # env.py drives its own event loop
        await asyncio.to_thread(command.upgrade, alembic_cfg, "head")
        logger.info("Database migrations completed")

    except Exception as e:
        logger.error(f"Database setup failed: {e}")
        raise


async def create_sample_data():
    """Seed the showcase collections shown on the public pages."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        store = RecordStore(db)
        for model, rows in ((CarouselImage, SAMPLE_CAROUSEL), (Pilot, SAMPLE_PILOTS)):
            existing = await db.scalar(select(func.count()).select_from(model))
            if existing:
                logger.info(f"{model.__tablename__} already has {existing} rows, skipping...")
                continue

            for row in rows:
                await store.create_record(model, row)
            logger.info(f"Seeded {len(rows)} rows into {model.__tablename__}")


async def main():
    """Main setup function."""
    logger.info("Starting aerodemo API setup...")

    await setup_database()
    await create_sample_data()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn aerodemo.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
