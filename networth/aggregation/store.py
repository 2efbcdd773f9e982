"""
Snapshot Store

Holds the current snapshot and the loading flag. This is the only state
the engine exposes.

The store never patches a snapshot: `commit` replaces the whole state and
`reset` replaces it with the zero snapshot. Listeners see every state in
commit order.
"""

from typing import Callable

from networth.audit import get_logger
from networth.models.snapshot import NetWorthSnapshot, SnapshotState


logger = get_logger(__name__)

SnapshotListener = Callable[[SnapshotState], None]


class SnapshotStore:
    """Current snapshot plus loading flag, replaced wholesale."""
    
    def __init__(self):
        self._state = SnapshotState()
        self._listeners: list[SnapshotListener] = []
    
    @property
    def state(self) -> SnapshotState:
        return self._state
    
    @property
    def snapshot(self) -> NetWorthSnapshot:
        return self._state.snapshot
    
    @property
    def is_loading(self) -> bool:
        return self._state.is_loading
    
    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener called with every new state.
        
        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)
        
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    def commit(self, snapshot: NetWorthSnapshot, loading: bool = False) -> SnapshotState:
        """
        Atomically replace the current state.
        
        Only the aggregation orchestrator calls this.
        """
        self._state = SnapshotState(snapshot=snapshot, is_loading=loading)
        self._publish()
        return self._state
    
    def reset(self) -> SnapshotState:
        """Replace the state with the zero snapshot, no owner, not loading."""
        return self.commit(NetWorthSnapshot.zero(), loading=False)
    
    def _publish(self) -> None:
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("snapshot_listener_failed")
