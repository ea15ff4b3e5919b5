"""
Outbound encoding — element trees into wire segment lists.

An encoder instance owns its segment buffer and serves exactly one send
operation. Each ``flush()`` issues one send call and clears the buffer.
"""

import logging
import re
from typing import Any, Callable, Optional

from pydantic import BaseModel

from milky_bridge.identity import Scene, decode_channel_id, parse_numeric_id
from milky_bridge.internal import Internal
from milky_bridge.models.universal import (
    At, AtAll, Audio, Channel, ChannelType, Content, Element, File, Fragment, Guild, Image,
    Message, Quote, Session, Text, User, Video, normalize_content, render_elements,
)

logger = logging.getLogger(__name__)

DATA_URI_PREFIX = re.compile(r"^data:([\w/.+-]+);base64,")
INLINE_URI_PREFIX = "base64://"


def to_wire_uri(src: str) -> str:
    """Rewrite ``data:<mime>;base64,<payload>`` as ``base64://<payload>``; other URIs pass through."""
    cap = DATA_URI_PREFIX.match(src)
    if cap:
        return INLINE_URI_PREFIX + src[cap.end():]
    return src


class SendContext(BaseModel):
    """Where an outgoing message goes and who sends it; copied onto the echo."""

    model_config = {"frozen": True}

    self_id: str
    channel_id: str
    guild_id: Optional[str] = None


class MessageEncoder:
    def __init__(
        self,
        internal: Internal,
        context: SendContext,
        on_send: Optional[Callable[[Session], None]] = None,
    ):
        self._internal = internal
        self._context = context
        self._on_send = on_send
        self._segments: list[dict[str, Any]] = []
        self._elements: list[Element] = []
        self.results: list[Message] = []

    async def send(self, content: Content) -> list[Message]:
        for element in normalize_content(content):
            await self.visit(element)
        await self.flush()
        return self.results

    async def flush(self) -> None:
        if not self._segments:
            return
        scene, peer_id = decode_channel_id(self._context.channel_id)
        if scene is Scene.GROUP:
            resp = await self._internal.send_group_message(peer_id, self._segments)
        else:
            resp = await self._internal.send_private_message(peer_id, self._segments)

        ctx = self._context
        user = User(id=ctx.self_id)
        channel = Channel(id=ctx.channel_id, type=ChannelType.TEXT if scene is Scene.GROUP else ChannelType.DIRECT)
        guild = Guild(id=ctx.guild_id) if ctx.guild_id else None
        timestamp = resp["time"] * 1000
        message = Message(
            id=str(resp["message_seq"]),
            elements=self._elements,
            content=render_elements(self._elements),
            timestamp=timestamp,
            channel=channel,
            guild=guild,
            user=user,
        )
        self.results.append(message)
        if self._on_send is not None:
            self._on_send(Session(
                type="send",
                self_id=ctx.self_id,
                timestamp=timestamp,
                user=user,
                channel=channel,
                guild=guild,
                message=message,
            ))
        self._segments = []
        self._elements = []

    async def visit(self, element: Element) -> None:
        if isinstance(element, Text):
            self._push(element, {"type": "text", "data": {"text": element.content}})
        elif isinstance(element, AtAll):
            self._push(element, {"type": "mention_all", "data": {}})
        elif isinstance(element, At):
            self._push(element, {"type": "mention", "data": {"user_id": parse_numeric_id(element.id, "mention id")}})
        elif isinstance(element, Image):
            self._push(element, {"type": "image", "data": {"uri": to_wire_uri(element.src), "sub_type": "normal"}})
        elif isinstance(element, Audio):
            self._push(element, {"type": "record", "data": {"uri": to_wire_uri(element.src)}})
        elif isinstance(element, Video):
            self._push(element, {"type": "video", "data": {"uri": to_wire_uri(element.src)}})
        elif isinstance(element, Quote):
            self._push(element, {"type": "reply", "data": {"message_seq": parse_numeric_id(element.id, "quote id")}})
        elif isinstance(element, Fragment) and element.type == "message":
            # one <message> per send call
            await self.flush()
            await self._visit_children(element)
            await self.flush()
        elif isinstance(element, (File, Fragment)) or type(element) is Element:
            await self._visit_children(element)
        else:
            raise TypeError(f"Unhandled element model {type(element).__name__}")

    async def _visit_children(self, element: Element) -> None:
        if not element.children:
            logger.debug("Element %s has no encodable content", element.type)
        for child in element.children:
            await self.visit(child)

    def _push(self, element: Element, segment: dict[str, Any]) -> None:
        self._segments.append(segment)
        self._elements.append(element)
