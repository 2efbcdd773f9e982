"""Session store package."""

from networth.services.session.interface import (
    ObservableSessionStore,
    SessionListener,
    SessionReadError,
    SessionStoreInterface,
    Unsubscribe,
)
from networth.services.session.stores import (
    InMemorySessionStore,
    KeyValueSessionStore,
)

__all__ = [
    "InMemorySessionStore",
    "KeyValueSessionStore",
    "ObservableSessionStore",
    "SessionListener",
    "SessionReadError",
    "SessionStoreInterface",
    "Unsubscribe",
]
