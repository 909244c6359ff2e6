import logging
from datetime import datetime

from app.auth.session import require_session
from app.errors import FetchFailed, ProfileWriteFailed
from app.schemas.profile import ProfileUpdate
from app.services.notifications import EventType, NotificationEvent, notify
from app.store import StoreError
from app.utils.validation import parse_model

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, store, sink):
        self.store = store
        self.sink = sink

    def get_profile(self, session):
        session = require_session(session)
        try:
            return self.store.for_session(session).get_profile(session.user_id)
        except StoreError as e:
            logger.error("Failed to fetch profile of %s: %s", session.user_id, e)
            raise FetchFailed("We couldn't load your profile.") from e

    def update_profile(self, session, changes):
        """Write only the fields present in ``changes``."""
        session = require_session(session)
        if not isinstance(changes, ProfileUpdate):
            changes = parse_model(ProfileUpdate, changes)
        values = changes.model_dump(exclude_unset=True)
        try:
            profile = self.store.for_session(session).upsert_profile(
                session.user_id, {**values, "updated_at": datetime.utcnow()}
            )
        except StoreError as e:
            logger.error("Failed to update profile of %s: %s", session.user_id, e)
            raise ProfileWriteFailed() from e

        notify(self.sink, NotificationEvent(
            type=EventType.PROFILE_EDIT,
            user=session.display_name,
            payload={"changes": changes.model_dump(mode="json", exclude_unset=True)},
        ))
        return profile
