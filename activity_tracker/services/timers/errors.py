"""Timer domain errors"""


class TimerError(Exception):
    """Base class for errors raised by the timer core"""


class InvalidInput(TimerError, ValueError):
    """Rejected input, raised before any state is mutated"""


class NotFound(TimerError, LookupError):
    """The timer id is not in the active set (stopped, cancelled or never existed)"""

    def __init__(self, timer_id: str):
        super().__init__(f"Active timer not found: {timer_id}")
        self.timer_id = timer_id


class StorageUnavailable(TimerError):
    """A persistence call failed. Reported, never fatal."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Storage operation '{operation}' failed: {cause}")
        self.operation = operation
        self.cause = cause
