"""
Channel identity codec.

The host sees one opaque channel id; the protocol addresses a peer by
``(message_scene, peer_id)``:

    "<group_id>"                 -> (group, group_id)   guild id == channel id
    "private:<user_id>"          -> (friend, user_id)
    "private:temp_<user_id>"     -> (temp, user_id)

Friend and temp share the ``private:`` namespace, so the temp prefix is
checked first.
"""

from enum import Enum
from typing import Optional, Union

from milky_bridge.errors import MalformedIdentifier

PRIVATE_PREFIX = "private:"
TEMP_PREFIX = "private:temp_"


class Scene(str, Enum):
    GROUP = "group"
    FRIEND = "friend"
    TEMP = "temp"


def parse_numeric_id(value: Union[str, int], what: str = "id") -> int:
    """Parse a numeric protocol id, rejecting anything that is not a plain non-negative integer."""
    if isinstance(value, bool):
        raise MalformedIdentifier(f"{what} must be numeric, got {value!r}", str(value))
    if isinstance(value, int):
        if value < 0:
            raise MalformedIdentifier(f"{what} must be non-negative, got {value}", str(value))
        return value
    if not isinstance(value, str) or not value.isascii() or not value.isdigit():
        raise MalformedIdentifier(f"{what} must be numeric, got {value!r}", str(value))
    return int(value)


def encode_channel_id(scene: Union[Scene, str], peer_id: int) -> str:
    scene = Scene(scene)
    peer_id = parse_numeric_id(peer_id, "peer id")
    if scene is Scene.GROUP:
        return str(peer_id)
    if scene is Scene.TEMP:
        return f"{TEMP_PREFIX}{peer_id}"
    return f"{PRIVATE_PREFIX}{peer_id}"


def decode_channel_id(channel_id: str) -> tuple[Scene, int]:
    if not isinstance(channel_id, str) or not channel_id:
        raise MalformedIdentifier(f"channel id must be a non-empty string, got {channel_id!r}", str(channel_id))
    if channel_id.startswith(TEMP_PREFIX):
        return Scene.TEMP, parse_numeric_id(channel_id[len(TEMP_PREFIX):], f"peer id in {channel_id!r}")
    if channel_id.startswith(PRIVATE_PREFIX):
        return Scene.FRIEND, parse_numeric_id(channel_id[len(PRIVATE_PREFIX):], f"peer id in {channel_id!r}")
    return Scene.GROUP, parse_numeric_id(channel_id, f"group channel id {channel_id!r}")


def guild_and_channel(scene: Union[Scene, str], peer_id: int) -> tuple[Optional[str], str]:
    """Return ``(guild_id, channel_id)``; only group scenes have a guild."""
    channel_id = encode_channel_id(scene, peer_id)
    return (channel_id if Scene(scene) is Scene.GROUP else None), channel_id
