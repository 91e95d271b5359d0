"""Custom exceptions for watchdrift."""

from watchdrift.core import config

logger = config.get_logger()


class LoggedException(Exception):
    """Base class that automatically logs messages."""

    def __init__(self, message: str) -> None:
        """Initialize a new instance of the LoggedException class.

        Args:
            message: The message to display.
        """
        logger.exception(message)
        super().__init__(message)


class InvalidFileTypeError(LoggedException):
    """Watchdrift did not expect this file extension."""

    pass


class ImportValidationError(LoggedException):
    """The export document is malformed or of an unsupported version."""

    pass


class WatchNotFoundError(LoggedException):
    """No watch with the requested id exists in the store."""

    pass


class MeasurementNotFoundError(LoggedException):
    """No measurement with the requested id exists in the store."""

    pass
