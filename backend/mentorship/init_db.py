# backend/mentorship/init_db.py
"""Create (or drop) the scheduling tables on the configured store."""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from .database import Base, engine
from .models import AvailabilitySlot, SessionBooking  # noqa: F401

logger = logging.getLogger(__name__)


def create_tables(bind: Optional[Engine] = None) -> None:
    """Create every table and constraint; existing tables are left alone."""
    target = bind or engine
    logger.info("Creating database tables on %s", target.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=target)
    logger.info("Tables created successfully")


def drop_tables(bind: Optional[Engine] = None) -> None:
    target = bind or engine
    Base.metadata.drop_all(bind=target)
    logger.info("Tables dropped")


if __name__ == "__main__":
    from .core.log_context import configure_logging

    configure_logging()
    create_tables()
