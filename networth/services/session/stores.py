"""
Session store implementations.

KeyValueSessionStore reads a browser-style key/value session: an access
token under one key and a JSON-encoded user under another. Both must be
present for a user to count as logged in.

InMemorySessionStore is set directly by the login/logout flow and pushes
every change to its subscribers.
"""

import json
from collections.abc import MutableMapping
from typing import Optional

from networth.config import MonitorSettings, get_settings
from networth.models.records import Identity
from networth.services.session.interface import (
    ObservableSessionStore,
    SessionListener,
    SessionReadError,
    SessionStoreInterface,
    Unsubscribe,
)


class KeyValueSessionStore(SessionStoreInterface):
    """Session kept as strings in a mutable mapping."""
    
    def __init__(
        self,
        storage: MutableMapping[str, str],
        settings: Optional[MonitorSettings] = None,
    ):
        settings = settings or get_settings().monitor
        self._storage = storage
        self._token_key = settings.token_key
        self._user_key = settings.user_key
    
    def current_identity(self) -> Optional[Identity]:
        token = self._storage.get(self._token_key)
        raw_user = self._storage.get(self._user_key)
        if not token or not raw_user:
            return None
        
        try:
            user = json.loads(raw_user)
        except (TypeError, ValueError) as e:
            raise SessionReadError(f"Stored user is not valid JSON: {e}") from e
        
        if not isinstance(user, dict) or not user.get("id"):
            raise SessionReadError("Stored user has no id")
        
        return Identity(
            user_id=str(user["id"]),
            email=user.get("email"),
            name=user.get("name"),
            access_token=token,
        )
    
    def login(self, identity: Identity, token: str) -> None:
        """Write a session the way the authentication flow does."""
        self._storage[self._token_key] = token
        self._storage[self._user_key] = json.dumps(
            {"id": identity.user_id, "email": identity.email, "name": identity.name}
        )
    
    def logout(self) -> None:
        self._storage.pop(self._token_key, None)
        self._storage.pop(self._user_key, None)


class InMemorySessionStore(ObservableSessionStore):
    """Session held in memory that notifies subscribers on every change."""
    
    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity
        self._listeners: list[SessionListener] = []
    
    def current_identity(self) -> Optional[Identity]:
        return self._identity
    
    def subscribe(self, listener: SessionListener) -> Unsubscribe:
        self._listeners.append(listener)
        
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    def login(self, identity: Identity) -> None:
        self._identity = identity
        self._notify()
    
    def logout(self) -> None:
        self._identity = None
        self._notify()
    
    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
