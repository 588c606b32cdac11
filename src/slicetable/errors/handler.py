import logging
from enum import Enum
from typing import Callable, Optional
from slicetable.errors import FetchAbortedError
from slicetable.events.bus import Event, EventBus
from dataclasses import dataclass, field

class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)

class ErrorHandler:
    """Route engine errors to the log, the event bus and the host UI.

    Aborted fetches are an expected outcome of scrolling and superseded
    gestures: they are logged at debug level and go nowhere else.
    """

    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callback: Optional[Callable[[str, ErrorSeverity], None]] = None

    def register_ui_callback(self, callback: Callable[[str, ErrorSeverity], None]):
        self._ui_callback = callback

    def handle(self, error: Exception, severity: ErrorSeverity = ErrorSeverity.ERROR, context: dict = None) -> bool:
        """Report *error*; return ``False`` when it was an abort and got dropped."""
        if isinstance(error, FetchAbortedError):
            self._logger.debug("Ignoring aborted operation: %s", error)
            return False

        log_method = getattr(self._logger, severity.value, self._logger.error)
        log_method(f"{error.__class__.__name__}: {error}", extra={"context": context or {}})

        self._events.publish(ErrorOccurredEvent(
            error=error,
            severity=severity,
            context=context or {}
        ))

        if self._ui_callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._ui_callback(str(error), severity)
        return True
