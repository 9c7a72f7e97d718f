"""
Current-user lookup used to gate session starts.
"""
import logging
from typing import Optional, Protocol

from pydantic import ValidationError

from .schemas import User
from ..config import USERS_COLLECTION
from ..infrastructure.data import JsonDocumentStore

logger = logging.getLogger("auth")


class UserProvider(Protocol):
    def get_current_user(self) -> Optional[User]: ...


class StaticUserProvider:
    """Returns a fixed user, or None to act as a signed-out client."""

    def __init__(self, user: Optional[User] = None):
        self.user = user

    def get_current_user(self) -> Optional[User]:
        return self.user


class StoredUserProvider:
    """Reads the signed-in user from the ``users`` collection."""

    def __init__(self, store: JsonDocumentStore, user_id: Optional[str],
                 collection: str = USERS_COLLECTION):
        self.store = store
        self.user_id = user_id
        self.collection = collection

    def get_current_user(self) -> Optional[User]:
        if not self.user_id:
            return None
        doc = self.store.get(self.collection, self.user_id)
        if doc is None:
            logger.warning(f"No user record for {self.user_id}")
            return None
        try:
            return User.model_validate(doc)
        except ValidationError as e:
            logger.error(f"Stored user {self.user_id} is malformed: {e}")
            return None

    def save_user(self, user: User) -> bool:
        return self.store.set(self.collection, user.id, user.model_dump(exclude={"id"}))
