"""
Exception hierarchy for UDP tracker communication.

Every error records the ``step`` that failed ("bind", "connect" or
"announce") plus optional structured ``details``.
"""
from typing import Any, Dict, Optional


class TrackerError(Exception):
    """Base exception for tracker errors."""

    def __init__(self, message: str, step: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.details = details or {}

    def __str__(self) -> str:
        text = f"[{self.step}] {self.message}" if self.step else self.message
        if self.details:
            return f"{text} (Details: {self.details})"
        return text


class BindFailed(TrackerError):
    """The local UDP socket could not be created or bound."""


class ResolveFailed(TrackerError):
    """The tracker hostname did not resolve to an IPv4 address."""


class SendFailed(TrackerError):
    """The request datagram could not be sent."""


class RecvTimeout(TrackerError):
    """No reply arrived within the receive timeout."""


class ProtocolMismatch(TrackerError):
    """The reply had the wrong transaction_id or action, or was a tracker error."""


class ShortResponse(TrackerError):
    """The reply was shorter than the fixed message header."""
