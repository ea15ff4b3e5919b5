"""
Event dispatch.

Every wire event yields a raw passthrough; recognized event types additionally
yield one classified Session.

Stream order is preserved: for each frame the raw event is emitted, then its
session, before anything from the next frame. Classification of later frames
may run while an earlier message is still resolving replies or file URLs.
"""

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from pydantic import ValidationError

from milky_bridge.decoder import MessageDecoder
from milky_bridge.identity import Scene, guild_and_channel, encode_channel_id
from milky_bridge.models.universal import (
    Channel, ChannelType, Guild, HostEvent, Message, RawEvent, Session, User,
)
from milky_bridge.models.wire import (
    FriendRequestData, GroupInvitationData, GroupInvitedJoinRequestData, GroupJoinRequestData,
    GroupMemberChangeData, IncomingMessage, MessageRecallData, WireEvent,
)
from milky_bridge.tokens import FriendRequestToken, GroupInvitationToken, GroupRequestToken

logger = logging.getLogger(__name__)

RAW_EVENT_PREFIX = "milky/"


def raw_event_type(event_type: str) -> str:
    return RAW_EVENT_PREFIX + event_type.replace("_", "-")


def parse_frame(frame: str) -> Optional[WireEvent]:
    """Parse one stream frame. Returns None if the frame is not a wire event."""
    try:
        return WireEvent.model_validate(json.loads(frame))
    except (ValueError, ValidationError) as e:
        logger.warning("Ignoring malformed event frame: %s", e)
        return None


def _group(group_id: int) -> tuple[Channel, Guild]:
    return Channel(id=str(group_id), type=ChannelType.TEXT), Guild(id=str(group_id))


class EventDispatcher:
    def __init__(self, decoder: MessageDecoder):
        self._decoder = decoder
        self._classifiers: dict[str, Callable[[WireEvent], Awaitable[Session]]] = {
            "message_receive": self._message_receive,
            "message_recall": self._message_recall,
            "friend_request": self._friend_request,
            "group_join_request": self._group_join_request,
            "group_invited_join_request": self._group_invited_join_request,
            "group_invitation": self._group_invitation,
            "group_member_increase": self._group_member_increase,
            "group_member_decrease": self._group_member_decrease,
        }

    def raw(self, event: WireEvent) -> RawEvent:
        return RawEvent(type=raw_event_type(event.event_type), self_id=str(event.self_id), data=event.data)

    async def classify(self, event: WireEvent) -> Optional[Session]:
        classifier = self._classifiers.get(event.event_type)
        if classifier is None:
            return None
        return await classifier(event)

    async def dispatch(self, event: WireEvent) -> list[HostEvent]:
        """Return ``[raw]`` or ``[raw, session]`` for one event."""
        events: list[HostEvent] = [self.raw(event)]
        session = await self.classify(event)
        if session is not None:
            events.append(session)
        return events

    async def run(self, frames: AsyncIterator[str], emit: Callable[[HostEvent], None]) -> None:
        """Consume frames until the iterator ends, emitting host events in frame order."""
        queue: asyncio.Queue[Optional[tuple[RawEvent, asyncio.Task]]] = asyncio.Queue()

        def deliver(event: HostEvent) -> None:
            try:
                emit(event)
            except Exception:
                logger.exception("Host handler failed on %s", event.type)

        async def drain() -> None:
            while True:
                item = await queue.get()
                if item is None:
                    return
                raw, task = item
                deliver(raw)
                try:
                    session = await task
                except Exception:
                    logger.exception("Failed to classify %s event", raw.type)
                    continue
                if session is not None:
                    deliver(session)

        consumer = asyncio.create_task(drain())
        try:
            async for frame in frames:
                event = parse_frame(frame)
                if event is None:
                    continue
                queue.put_nowait((self.raw(event), asyncio.create_task(self.classify(event))))
        except BaseException:
            pending: list[asyncio.Future] = [consumer]
            while not queue.empty():
                item = queue.get_nowait()
                if item is not None:
                    pending.append(item[1])
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise
        queue.put_nowait(None)
        await consumer

    def _session(self, event: WireEvent, type: str, **fields: object) -> Session:
        fields.setdefault("timestamp", event.time * 1000)
        return Session(type=type, self_id=str(event.self_id), raw=event.model_dump(), **fields)

    async def _message_receive(self, event: WireEvent) -> Session:
        message = await self._decoder.decode(IncomingMessage.model_validate(event.data))
        return self._session(
            event, "message",
            timestamp=message.timestamp,
            user=message.user,
            channel=message.channel,
            guild=message.guild,
            member=message.member,
            message=message,
        )

    async def _message_recall(self, event: WireEvent) -> Session:
        data = MessageRecallData.model_validate(event.data)
        scene = Scene(data.message_scene)
        guild_id, channel_id = guild_and_channel(scene, data.peer_id)
        return self._session(
            event, "message-deleted",
            user=User(id=str(data.sender_id)),
            operator=User(id=str(data.operator_id)) if data.operator_id is not None else None,
            channel=Channel(id=channel_id, type=ChannelType.TEXT if guild_id else ChannelType.DIRECT),
            guild=Guild(id=guild_id) if guild_id else None,
            message=Message(id=str(data.message_seq)),
        )

    async def _friend_request(self, event: WireEvent) -> Session:
        data = FriendRequestData.model_validate(event.data)
        token = FriendRequestToken(initiator_uid=data.initiator_uid)
        return self._session(
            event, "friend-request",
            user=User(id=str(data.initiator_id)),
            channel=Channel(id=encode_channel_id(Scene.FRIEND, data.initiator_id), type=ChannelType.DIRECT),
            message=Message(id=token.to_token(), content=data.comment),
        )

    async def _group_join_request(self, event: WireEvent) -> Session:
        data = GroupJoinRequestData.model_validate(event.data)
        channel, guild = _group(data.group_id)
        token = GroupRequestToken(
            notification_seq=data.notification_seq,
            kind="join_request",
            group_id=data.group_id,
            is_filtered=data.is_filtered,
        )
        return self._session(
            event, "guild-member-request",
            user=User(id=str(data.initiator_id)),
            channel=channel,
            guild=guild,
            message=Message(id=token.to_token(), content=data.comment),
        )

    async def _group_invited_join_request(self, event: WireEvent) -> Session:
        data = GroupInvitedJoinRequestData.model_validate(event.data)
        channel, guild = _group(data.group_id)
        token = GroupRequestToken(
            notification_seq=data.notification_seq,
            kind="invited_join_request",
            group_id=data.group_id,
        )
        return self._session(
            event, "guild-member-request",
            user=User(id=str(data.target_user_id)),
            operator=User(id=str(data.initiator_id)),
            channel=channel,
            guild=guild,
            message=Message(id=token.to_token()),
        )

    async def _group_invitation(self, event: WireEvent) -> Session:
        data = GroupInvitationData.model_validate(event.data)
        channel, guild = _group(data.group_id)
        token = GroupInvitationToken(invitation_seq=data.invitation_seq)
        return self._session(
            event, "guild-request",
            user=User(id=str(data.initiator_id)),
            channel=channel,
            guild=guild,
            message=Message(id=token.to_token()),
        )

    async def _group_member_increase(self, event: WireEvent) -> Session:
        return self._member_change(event, "guild-member-added")

    async def _group_member_decrease(self, event: WireEvent) -> Session:
        return self._member_change(event, "guild-member-removed")

    def _member_change(self, event: WireEvent, type: str) -> Session:
        data = GroupMemberChangeData.model_validate(event.data)
        channel, guild = _group(data.group_id)
        return self._session(
            event, type,
            user=User(id=str(data.user_id)),
            operator=User(id=str(data.operator_id)) if data.operator_id is not None else None,
            channel=channel,
            guild=guild,
        )
