import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homecare.db.models.activity import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    actor: str,
    action: str,
    entity_type: str,
    entity_id: str = None,
    details: str = None
):
    """
    Records an activity in the audit log.

    :param db: Database session
    :param actor: Who did it (dsp id, "office", ...)
    :param action: String describing action (e.g. CREATE, UPDATE, SUBMIT)
    :param entity_type: String describing resource (e.g. POC, DAILY_LOG)
    :param entity_id: ID of the resource
    :param details: Optional string or textual JSON with more info
    """
    try:
        db.add(ActivityLog(
            actor=actor or "office",
            action=action,
            entity_type=entity_type,
            entity_id=None if entity_id is None else str(entity_id),
            details=details,
        ))
        db.commit()
    except SQLAlchemyError as e:
        # the audit trail must not break the main flow
        logger.error(f"Error logging activity {action} {entity_type}/{entity_id}: {e}")
        db.rollback()
