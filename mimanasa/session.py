import asyncio
import json
import logging
from typing import Optional

from pydantic import ValidationError

from mimanasa.models import UserSession
from mimanasa.storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class SessionManager:
    """Loads, persists and clears the authenticated user's session record.

    Every method fails soft: storage and parse errors are logged and reported
    through the return value, never raised to the caller.
    """

    def __init__(self, store: KeyValueStore, key: str = "@user_session") -> None:
        self._store = store
        self.key = key

    async def load_session(self) -> Optional[UserSession]:
        """Read the persisted session; None when absent or unreadable."""
        try:
            raw = await asyncio.to_thread(self._store.get, self.key)
        except StorageError as e:
            logger.error(f"Failed to load user session: {e}")
            return None

        if raw is None:
            return None

        try:
            return UserSession.model_validate(json.loads(raw))
        except (ValueError, TypeError, ValidationError) as e:
            logger.error(f"Failed to parse stored user session: {e}")
            return None

    async def save_session(self, session: UserSession) -> bool:
        try:
            payload = json.dumps(session.to_record(), ensure_ascii=False)
            await asyncio.to_thread(self._store.set, self.key, payload)
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Failed to save user session: {e}")
            return False
        logger.debug(f"Session saved for user id={session.id}")
        return True

    async def clear_session(self) -> bool:
        try:
            await asyncio.to_thread(self._store.remove, self.key)
        except StorageError as e:
            logger.error(f"Failed to clear user session: {e}")
            return False
        return True
