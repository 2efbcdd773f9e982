"""
Identity Monitor

Watches the externally owned session and tells an observer when a user
logs in, switches, or logs out.

DESIGN DECISION: Push first, poll as fallback.
If the session store can announce changes (ObservableSessionStore) the
monitor subscribes to it. Otherwise it samples the session on a fixed
interval. Observers see the same three events either way.

Unreadable session data counts as "nobody logged in". The error is logged
once per distinct failure and never reaches the observer.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from networth.audit import get_logger
from networth.config import MonitorSettings, get_settings
from networth.models.records import Identity
from networth.services.session import (
    ObservableSessionStore,
    SessionStoreInterface,
    Unsubscribe,
)


logger = get_logger(__name__)


class IdentityObserver(ABC):
    """Receives identity transitions from the monitor."""
    
    @abstractmethod
    def identity_appeared(self, identity: Identity) -> None:
        """Someone logged in while nobody was."""
        pass
    
    @abstractmethod
    def identity_changed(self, old: Identity, new: Identity) -> None:
        """A different user replaced the logged-in one."""
        pass
    
    @abstractmethod
    def identity_disappeared(self, old: Identity) -> None:
        """The logged-in user logged out."""
        pass


class IdentityMonitor:
    """
    Detects identity transitions and forwards them to one observer.
    
    Lifecycle: start() -> (events) -> stop(). No events after stop().
    """
    
    def __init__(
        self,
        session_store: SessionStoreInterface,
        observer: IdentityObserver,
        settings: Optional[MonitorSettings] = None,
    ):
        settings = settings or get_settings().monitor
        self._session_store = session_store
        self._observer = observer
        self._poll_interval = settings.poll_interval_seconds
        
        self._known: Optional[Identity] = None
        self._last_error: Optional[str] = None
        self._running = False
        self._poll_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Unsubscribe] = None
    
    @property
    def known_identity(self) -> Optional[Identity]:
        return self._known
    
    @property
    def is_running(self) -> bool:
        return self._running
    
    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None
    
    def start(self) -> None:
        """
        Begin watching the session and run an initial check.
        
        Must be called from inside a running event loop when the session
        store has to be polled.
        """
        if self._running:
            return
        self._running = True
        
        if isinstance(self._session_store, ObservableSessionStore):
            self._unsubscribe = self._session_store.subscribe(self.check)
        else:
            self._poll_task = asyncio.create_task(self._poll())
        
        self.check()
    
    async def stop(self) -> None:
        """Stop watching. Safe to call more than once."""
        self._running = False
        
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        
        task, self._poll_task = self._poll_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
    
    def check(self) -> None:
        """Sample the session once and report any transition."""
        if not self._running:
            return
        
        current = self.read_identity()
        previous = self._known
        
        if current is None:
            if previous is not None:
                self._known = None
                logger.info("identity_disappeared", old=previous.user_id)
                self._observer.identity_disappeared(previous)
            return
        
        if previous is None:
            self._known = current
            logger.info("identity_appeared", new=current.user_id)
            self._observer.identity_appeared(current)
        elif not current.same_user(previous):
            self._known = current
            logger.info("identity_changed", old=previous.user_id, new=current.user_id)
            self._observer.identity_changed(previous, current)
    
    def read_identity(self) -> Optional[Identity]:
        """Current identity, with any session error treated as logged out."""
        try:
            identity = self._session_store.current_identity()
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            if message != self._last_error:
                logger.warning("session_unreadable", error=message)
                self._last_error = message
            return None
        
        self._last_error = None
        return identity
    
    async def _poll(self) -> None:
        while self._running:
            await asyncio.sleep(self._poll_interval)
            self.check()
