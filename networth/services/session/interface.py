"""
Session Store Interface

The session is owned by an external authentication flow. The engine only
reads it. Stores that can announce changes implement ObservableSessionStore;
the identity monitor polls the others.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from networth.models.records import Identity


SessionListener = Callable[[], None]
Unsubscribe = Callable[[], None]


class SessionStoreInterface(ABC):
    """Read-only view of the current session."""
    
    @abstractmethod
    def current_identity(self) -> Optional[Identity]:
        """
        Return the logged-in identity, or None if nobody is logged in.
        
        Raises:
            SessionReadError: If the session data is malformed
        """
        pass


class ObservableSessionStore(SessionStoreInterface):
    """A session store that calls back whenever the session changes."""
    
    @abstractmethod
    def subscribe(self, listener: SessionListener) -> Unsubscribe:
        """Register a change listener. Returns a callable that removes it."""
        pass


class SessionReadError(Exception):
    """Session data exists but cannot be interpreted."""
    pass
