"""Celery tasks for credential token housekeeping."""

import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yang.celery_app import app as celery_app
from yang.database import SessionLocal
from yang.models.mixins import utc_now
from yang.services.tokens import TokenStore

logger = logging.getLogger(__name__)

RETENTION = timedelta(days=1)


@celery_app.task
def purge_expired_tokens() -> dict:
    """Delete credential tokens that expired or were used more than a day ago.

    This task runs every hour via celery-beat.

    Returns:
        dict with the number of deleted rows
    """
    db: Session = SessionLocal()

    try:
        deleted = TokenStore(db).purge(before=utc_now() - RETENTION)
        db.commit()
        logger.info(f"Purged {deleted} credential token(s)")
        return {"deleted": deleted}

    except SQLAlchemyError as e:
        logger.error(f"Error purging credential tokens: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}

    finally:
        db.close()
