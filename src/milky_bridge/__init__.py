"""
milky-bridge — Milky protocol adapter for Python.

Translates the Milky HTTP action API and /event WebSocket stream to and
from a platform-agnostic message model.
"""

from milky_bridge.bot import MilkyBot
from milky_bridge.config import BotConfig
from milky_bridge.errors import (
    MilkyError, RemoteActionError, TransportError, UnsupportedOperation,
    MalformedIdentifier, ResolutionFailure, ConnectionError,
)
from milky_bridge.identity import Scene, encode_channel_id, decode_channel_id
from milky_bridge.models.universal import Message, Session, RawEvent
from milky_bridge.transport.ws import ConnectionState

__version__ = "0.1.0"
__all__ = [
    "MilkyBot",
    "BotConfig",
    "MilkyError",
    "RemoteActionError",
    "TransportError",
    "UnsupportedOperation",
    "MalformedIdentifier",
    "ResolutionFailure",
    "ConnectionError",
    "Scene",
    "encode_channel_id",
    "decode_channel_id",
    "Message",
    "Session",
    "RawEvent",
    "ConnectionState",
]
