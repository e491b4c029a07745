# headpress/scripts/prestart.py
"""
Container prestart: waits for the database, then seeds the rows every
installation needs. Run migrations (`alembic upgrade head`) before this.
"""
import logging
import sys
import time

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from headpress.core.config import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60
wait_seconds = 2


def wait_for_database() -> bool:
    uri = settings.DATABASE_URI
    if settings.POSTGRES_PASSWORD:
        uri = uri.replace(settings.POSTGRES_PASSWORD, "******")
    logger.info(f"Waiting for the database at: {uri}")

    engine = create_engine(settings.DATABASE_URI)
    for attempt in range(1, max_tries + 1):
        try:
            with engine.connect():
                logger.info("Database connection established")
                return True
        except SQLAlchemyError as e:
            logger.warning(f"Attempt {attempt}/{max_tries}: database not ready, retrying...")
            logger.debug(f"Connection error: {e}")
            time.sleep(wait_seconds)
    return False


def main() -> int:
    if not wait_for_database():
        logger.error("Could not connect to the database, giving up.")
        return 1

    from headpress.db.init_db import init_db
    from headpress.db.session import SessionLocal

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("Initial data seeded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
