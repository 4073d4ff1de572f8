"""Apply the profiles/transactions/mileage schema using Alembic.

Usage:
    python scripts/migrate.py            # upgrade to the latest revision
    python scripts/migrate.py --list     # show pending revisions only
    python scripts/migrate.py --sql      # print the upgrade SQL without applying it
"""

import argparse
import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine

# Add project root to path so config is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings

logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def alembic_config() -> Config:
    """Alembic config pointing at migrations/ and the configured database."""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", settings.database_url_sync)
    return config


def pending_revisions(config: Config) -> list[str]:
    """Revisions between the database's current revision and head, oldest first."""
    script = ScriptDirectory.from_config(config)
    engine = create_engine(settings.database_url_sync)
    try:
        with engine.connect() as conn:
            current = MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
    revisions = script.iterate_revisions(script.get_current_head(), current)
    return [rev.revision for rev in reversed(list(revisions))]


def main() -> None:
    """Apply (or list) pending migrations."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--list", action="store_true", help="List pending migrations and exit")
    parser.add_argument("--sql", action="store_true", help="Print upgrade SQL instead of applying")
    args = parser.parse_args()

    config = alembic_config()
    if args.sql:
        command.upgrade(config, "head", sql=True)
        return

    logger.info("Connecting to database...")
    to_apply = pending_revisions(config)
    if not to_apply:
        logger.info("No pending migrations.")
        return

    if args.list:
        for revision in to_apply:
            logger.info("Pending: %s", revision)
        return

    logger.info("Applying %d migration(s)...", len(to_apply))
    command.upgrade(config, "head")
    logger.info("Migrations applied successfully.")


if __name__ == "__main__":
    main()
