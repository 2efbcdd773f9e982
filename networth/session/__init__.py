"""Identity monitoring package."""

from networth.session.monitor import IdentityMonitor, IdentityObserver

__all__ = ["IdentityMonitor", "IdentityObserver"]
