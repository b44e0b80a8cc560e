"""Celery tasks for periodic cleanup."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from quotekeeper.celery_app import app as celery_app
from quotekeeper.database import SessionLocal, get_engine
from quotekeeper.stores.sql import SqlStore

logger = logging.getLogger(__name__)


@celery_app.task
def reap_expired_sessions() -> dict:
    """Delete expired sessions from the durable store.

    Runs on the celery-beat schedule. Reads already treat expired sessions as absent;
    this only keeps the sessions table from growing.

    Returns:
        dict with the number of deleted sessions
    """
    get_engine()
    db: Session = SessionLocal()
    try:
        deleted = SqlStore(db).delete_expired_sessions(datetime.now(UTC))
        if deleted:
            logger.info(f"Reaped {deleted} expired sessions")
        return {"deleted": deleted}
    finally:
        db.close()
