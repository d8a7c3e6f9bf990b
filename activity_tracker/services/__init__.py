"""Services module"""

from activity_tracker.services.timers import TimerManager, TimerSession, SessionRegistry

__all__ = [
    "TimerManager",
    "TimerSession",
    "SessionRegistry",
]
