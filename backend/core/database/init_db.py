# ------------------------------ IMPORTS ------------------------------
"""
Database initialization script.

Run this script to create all database tables.
Usage: python -m core.database.init_db [--reset]
"""
import sys
import logging

from core.database.connection import init_db, drop_db
from core.config.settings import settings

# ------------------------------ LOGGING ------------------------------
logger = logging.getLogger(__name__)

# ------------------------------ MAIN ------------------------------

def main(argv=None):
    """Initialize database tables, optionally dropping them first."""
    argv = sys.argv[1:] if argv is None else argv
    url = settings.database.database_url

    try:
        logger.info(f"Database URL: {url.split('@')[1] if '@' in url else url}")

        if "--reset" in argv:
            drop_db()
        init_db()
        logger.info("Database initialized successfully!")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
