"""
Milky bridge error types.
"""

from typing import Any, Optional


class MilkyError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class RemoteActionError(MilkyError):
    """The protocol server answered an action call with ``status: failed``."""

    def __init__(self, action: str, message: str, retcode: Optional[int] = None):
        super().__init__("remote_error", message, {"action": action, "retcode": retcode})
        self.action = action
        self.retcode = retcode


class TransportError(MilkyError):
    """The action call could not complete (network, HTTP status or body)."""

    def __init__(self, message: str, action: Optional[str] = None):
        super().__init__("transport_error", message, {"action": action} if action else None)
        self.action = action


class UnsupportedOperation(MilkyError):
    def __init__(self, message: str):
        super().__init__("unsupported", message)


class MalformedIdentifier(MilkyError, ValueError):
    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__("malformed_identifier", message, {"value": value} if value is not None else None)
        self.value = value


class ResolutionFailure(MilkyError):
    """A quoted message could not be fetched. Never leaves the decoder."""

    def __init__(self, message: str, channel_id: str, message_id: str):
        super().__init__("resolution_failed", message, {"channel_id": channel_id, "message_id": message_id})


class ConnectionError(MilkyError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)
