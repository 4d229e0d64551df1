#!/usr/bin/env python3
"""
Create the database tables and load the demo fixtures.

Uses DATABASE_URL from the environment (or .env). A database that
already has users is left untouched.
"""
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> int:
    """Create all tables, then seed them through DatabaseStorage."""
    from esports_arena.core.config import settings
    from esports_arena.core.database import get_engine, get_session_factory, init_db
    from esports_arena.storage import DatabaseStorage
    from esports_arena.storage.seed import seed_storage

    logger.info("Creating database tables...")
    init_db(get_engine())

    storage = DatabaseStorage(get_session_factory())
    existing = storage.get_users_count()
    if existing:
        logger.warning(f"Database already has {existing} users; skipping seed")
        return 1

    seed_storage(storage)
    logger.info(f"Demo data loaded into {settings.DATABASE_URL}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
