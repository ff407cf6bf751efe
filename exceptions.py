"""Custom exception classes for the structure fuel status reporter.

Parse errors are per-row and recoverable: the row is rejected and reported.
Delivery errors are per-message: the failure is logged and the remaining
messages are still sent. Configuration errors abort the run.
"""

from typing import Optional


class FuelReportError(Exception):
    """Base class for every error raised by this project."""


class ConfigError(FuelReportError):
    """Raised when a required setting is missing or invalid.

    Args:
        name: The setting or environment variable at fault.
        reason: Human-readable explanation.
    """

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid configuration for '{name}': {reason}")


class RemainingTimeParseError(FuelReportError):
    """Raised when a remaining-time cell is not ``"<days> days <hours> hours"``.

    Args:
        field: The name of the field being parsed (e.g. "remaining").
        value: The raw cell value that failed to parse.
        reason: Human-readable explanation of why the value is invalid.
    """

    def __init__(self, field: str, value: str, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid value for '{field}': '{value}'. {reason}"
        )


class MessageTooLongError(FuelReportError):
    """Raised when text cannot fit in a single webhook message.

    Args:
        length: Length of the offending text.
        limit: Maximum allowed length.
    """

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"Message too long: {length} characters exceeds the limit of {limit}"
        )


class DeliveryError(FuelReportError):
    """Raised when the webhook does not accept a message.

    Args:
        status_code: HTTP status returned, or ``None`` if the request never
            got a response (DNS failure, timeout, connection reset).
        detail: Response body or exception text.
    """

    def __init__(self, status_code: Optional[int], detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        status = status_code if status_code is not None else "no response"
        super().__init__(f"Webhook delivery failed ({status}): {detail}")
