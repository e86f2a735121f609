import logging
import os
import sys

from flask_migrate import upgrade
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from .models import db

logger = logging.getLogger(__name__)


def prepare_database(app, migrations_dir="migrations"):
    """Check the connection, then apply migrations or fall back to create_all."""
    with app.app_context():
        try:
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")
        except OperationalError as e:
            logger.error(f"Database connection failed: {e}")
            return False

        if os.path.isdir(migrations_dir):
            upgrade(directory=migrations_dir)
            logger.info("Database migrations applied successfully")
        else:
            db.create_all()
            logger.info("Database tables created")
    return True


if __name__ == "__main__":
    from . import app

    if not prepare_database(app):
        sys.exit(1)
