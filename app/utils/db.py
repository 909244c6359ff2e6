from contextlib import contextmanager
import logging
from models import db

logger = logging.getLogger(__name__)


@contextmanager
def transactional(message="DB transaction failed"):
    """Commit the session on exit; roll back and re-raise on any error.

    Used by the SQL store and the local account and seeding code.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception as e:
        logger.error("%s: %s", message, e, exc_info=True)
        db.session.rollback()
        raise
