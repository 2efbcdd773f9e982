"""Goal synchronization package."""

from networth.goals.synchronizer import GoalSynchronizer

__all__ = ["GoalSynchronizer"]
