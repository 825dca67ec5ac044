"""User and profile helpers built on the data layer."""

from typing import Callable, Dict, List, Optional

from .data_layer import CREATED_AT, FirebaseDataLayer
from .result import Result
from .subscription import Subscription

USERS = 'users'
PROFILES = 'profiles'


class UserDirectory:
    """The ``users`` and ``profiles`` collections."""

    def __init__(self, data_layer: FirebaseDataLayer):
        self.data = data_layer

    def add_user(self, user_data: Dict) -> Result[Dict]:
        return self.data.add_document(USERS, user_data)

    def create_user_profile(self, user_id: str, profile_data: Dict) -> Result[None]:
        """Profiles are keyed by the auth uid."""
        return self.data.set_document(PROFILES, user_id, profile_data)

    def get_user(self, user_id: str) -> Result[Dict]:
        return self.data.get_document(USERS, user_id)

    def get_all_users(self) -> Result[List[Dict]]:
        return self.data.get_all_documents(USERS)

    def get_active_users(self, limit_count: int = 10) -> Result[List[Dict]]:
        """Newest active users first."""
        return self.data.query_documents(USERS, 'status', 'active', CREATED_AT, 'desc', limit_count)

    def update_user(self, user_id: str, updates: Dict) -> Result[None]:
        return self.data.update_document(USERS, user_id, updates)

    def delete_user(self, user_id: str) -> Result[None]:
        return self.data.delete_document(USERS, user_id)

    def listen_to_users(self, callback: Optional[Callable[[List[Dict]], None]] = None) -> Subscription:
        return self.data.watch_collection(USERS, callback)

    def listen_to_user(self, user_id: str,
                       callback: Optional[Callable[[Optional[Dict]], None]] = None) -> Subscription:
        return self.data.watch_document(USERS, user_id, callback)
