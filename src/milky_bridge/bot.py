"""
MilkyBot — host-facing client.

Wires the action client, decoder, encoder, dispatcher and event stream
together and exposes the universal-model operations the host calls.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

import httpx

from milky_bridge.config import BotConfig
from milky_bridge.decoder import (
    MessageDecoder, decode_friend, decode_group_channel, decode_guild, decode_guild_member,
    decode_login_user, decode_private_channel, decode_user,
)
from milky_bridge.dispatcher import EventDispatcher
from milky_bridge.encoder import MessageEncoder, SendContext
from milky_bridge.errors import TransportError, UnsupportedOperation
from milky_bridge.identity import Scene, decode_channel_id, encode_channel_id, guild_and_channel, parse_numeric_id
from milky_bridge.internal import Internal
from milky_bridge.models.universal import (
    Channel, ChannelType, Content, Guild, GuildMember, HostEvent, Login, Message, PagedList, User,
)
from milky_bridge.models.wire import (
    FriendEntity, GroupEntity, GroupMemberEntity, IncomingMessage, LoginInfo, UserProfile,
)
from milky_bridge.tokens import FriendRequestToken, GroupInvitationToken, GroupRequestToken
from milky_bridge.transport.http import HttpClient
from milky_bridge.transport.ws import ConnectionState, WsClient

logger = logging.getLogger(__name__)

HISTORY_DIRECTION = "before"


class MilkyBot:
    """Async bot client (primary)."""

    def __init__(
        self,
        config: Optional[BotConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **options: Any,
    ):
        self.config = config or BotConfig(**options)
        self.http = HttpClient(self.config, transport=transport)
        self.internal = Internal(self.http)
        self.decoder = MessageDecoder(self.internal, self.get_message)
        self.dispatcher = EventDispatcher(self.decoder)
        self.ws = WsClient(self.config, self.dispatcher, self.get_login, self.dispatch)
        self.login: Optional[Login] = None
        self._event_handlers: list[Callable[[HostEvent], None]] = []

    @property
    def self_id(self) -> Optional[str]:
        return self.login.self_id if self.login else None

    @property
    def state(self) -> ConnectionState:
        return self.ws.state

    @property
    def online(self) -> bool:
        return self.ws.online

    # --- lifecycle ---

    def add_event_handler(self, handler: Callable[[HostEvent], None]) -> Callable[[], None]:
        """Add a handler for raw events and sessions. Returns a cleanup function."""
        self._event_handlers.append(handler)

        def remove() -> None:
            try:
                self._event_handlers.remove(handler)
            except ValueError:
                pass
        return remove

    def dispatch(self, event: HostEvent) -> None:
        for handler in list(self._event_handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed on %s", event.type)

    async def start(self) -> None:
        """Run one event stream connection until it closes."""
        await self.ws.run()

    async def stop(self) -> None:
        await self.ws.close()

    async def close(self) -> None:
        await self.ws.close()
        await self.http.close()

    # --- login / users ---

    async def get_login(self) -> Login:
        data = await self.internal.get_login_info()
        self.login = decode_login_user(LoginInfo.model_validate(data))
        return self.login

    async def get_user(self, user_id: str) -> User:
        uid = parse_numeric_id(user_id, "user id")
        data = await self.internal.get_user_profile(uid)
        return decode_user(UserProfile.model_validate(data), uid)

    async def get_friend_list(self, next: Optional[str] = None) -> PagedList[User]:
        data = await self.internal.get_friend_list()
        return PagedList[User](data=[decode_friend(FriendEntity.model_validate(f)) for f in data["friends"]])

    async def handle_friend_request(self, message_id: str, approve: bool, comment: Optional[str] = None) -> None:
        token = FriendRequestToken.parse(message_id)
        if approve:
            await self.internal.accept_friend_request(token.initiator_uid, token.is_filtered)
        else:
            await self.internal.reject_friend_request(token.initiator_uid, token.is_filtered, comment)

    # --- guilds / channels ---

    async def get_guild(self, guild_id: str) -> Guild:
        data = await self.internal.get_group_info(parse_numeric_id(guild_id, "guild id"))
        return decode_guild(GroupEntity.model_validate(data["group"]))

    async def get_guild_list(self, next: Optional[str] = None) -> PagedList[Guild]:
        data = await self.internal.get_group_list()
        return PagedList[Guild](data=[decode_guild(GroupEntity.model_validate(g)) for g in data["groups"]])

    async def get_channel(self, channel_id: str) -> Channel:
        scene, peer_id = decode_channel_id(channel_id)
        if scene is Scene.GROUP:
            data = await self.internal.get_group_info(peer_id)
            return decode_group_channel(GroupEntity.model_validate(data["group"]))
        data = await self.internal.get_user_profile(peer_id)
        return decode_private_channel(UserProfile.model_validate(data), channel_id)

    async def get_channel_list(self, guild_id: str, next: Optional[str] = None) -> PagedList[Channel]:
        """A group has exactly one channel."""
        data = await self.internal.get_group_info(parse_numeric_id(guild_id, "guild id"))
        return PagedList[Channel](data=[decode_group_channel(GroupEntity.model_validate(data["group"]))])

    async def create_direct_channel(self, user_id: str) -> Channel:
        channel_id = encode_channel_id(Scene.FRIEND, parse_numeric_id(user_id, "user id"))
        return Channel(id=channel_id, type=ChannelType.DIRECT)

    async def get_guild_member(self, guild_id: str, user_id: str) -> GuildMember:
        data = await self.internal.get_group_member_info(
            parse_numeric_id(guild_id, "guild id"), parse_numeric_id(user_id, "user id"),
        )
        return decode_guild_member(GroupMemberEntity.model_validate(data["member"]))

    async def get_guild_member_list(self, guild_id: str, next: Optional[str] = None) -> PagedList[GuildMember]:
        data = await self.internal.get_group_member_list(parse_numeric_id(guild_id, "guild id"))
        return PagedList[GuildMember](
            data=[decode_guild_member(GroupMemberEntity.model_validate(m)) for m in data["members"]],
        )

    async def kick_guild_member(self, guild_id: str, user_id: str, permanent: bool = False) -> None:
        await self.internal.kick_group_member(
            parse_numeric_id(guild_id, "guild id"), parse_numeric_id(user_id, "user id"), permanent,
        )

    async def mute_guild_member(self, guild_id: str, user_id: str, duration: int) -> None:
        """Mute for ``duration`` milliseconds; 0 lifts the mute."""
        await self.internal.set_group_member_mute(
            parse_numeric_id(guild_id, "guild id"), parse_numeric_id(user_id, "user id"), duration // 1000,
        )

    async def handle_guild_member_request(
        self, message_id: str, approve: bool, comment: Optional[str] = None,
    ) -> None:
        token = GroupRequestToken.parse(message_id)
        if approve:
            await self.internal.accept_group_request(
                token.notification_seq, token.kind, token.group_id, token.is_filtered,
            )
        else:
            await self.internal.reject_group_request(
                token.notification_seq, token.kind, token.group_id, token.is_filtered, comment,
            )

    async def handle_guild_request(
        self, message_id: str, approve: bool, comment: Optional[str] = None, *, guild_id: str,
    ) -> None:
        """Accept or reject an invitation for the bot to join ``guild_id``."""
        token = GroupInvitationToken.parse(message_id)
        group_id = parse_numeric_id(guild_id, "guild id")
        if approve:
            await self.internal.accept_group_invitation(group_id, token.invitation_seq)
        else:
            await self.internal.reject_group_invitation(group_id, token.invitation_seq)

    # --- messages ---

    async def get_message(self, channel_id: str, message_id: str) -> Message:
        scene, peer_id = decode_channel_id(channel_id)
        data = await self.internal.get_message(scene.value, peer_id, parse_numeric_id(message_id, "message id"))
        if not data.get("message"):
            raise TransportError(f"Message {message_id} not found in {channel_id}", action="get_message")
        return await self.decoder.decode(IncomingMessage.model_validate(data["message"]))

    async def get_message_list(
        self,
        channel_id: str,
        next: Optional[str] = None,
        direction: str = HISTORY_DIRECTION,
        limit: Optional[int] = None,
    ) -> PagedList[Message]:
        """Fetch one page of messages older than ``next``.

        Only the ``before`` direction exists in the protocol; any other
        direction is rejected without a request.
        """
        if direction != HISTORY_DIRECTION:
            raise UnsupportedOperation(f"Message history direction {direction!r} is not supported")
        scene, peer_id = decode_channel_id(channel_id)
        start = parse_numeric_id(next, "message cursor") if next is not None else None
        data = await self.internal.get_history_messages(scene.value, peer_id, start, limit)
        incoming = [IncomingMessage.model_validate(raw) for raw in data.get("messages", [])]
        messages = await asyncio.gather(*(self.decoder.decode(m) for m in incoming))
        cursor = data.get("next_message_seq")
        return PagedList[Message](data=list(messages), next=str(cursor) if cursor is not None else None)

    async def send_message(self, channel_id: str, content: Content, guild_id: Optional[str] = None) -> list[Message]:
        if guild_id is None:
            guild_id, _ = guild_and_channel(*decode_channel_id(channel_id))
        if self.login is None:
            await self.get_login()
        context = SendContext(self_id=self.self_id, channel_id=channel_id, guild_id=guild_id)
        return await MessageEncoder(self.internal, context, self.dispatch).send(content)

    async def send_private_message(self, user_id: str, content: Content) -> list[Message]:
        channel_id = encode_channel_id(Scene.FRIEND, parse_numeric_id(user_id, "user id"))
        return await self.send_message(channel_id, content)

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        scene, peer_id = decode_channel_id(channel_id)
        seq = parse_numeric_id(message_id, "message id")
        if scene is Scene.GROUP:
            await self.internal.recall_group_message(peer_id, seq)
        else:
            await self.internal.recall_private_message(peer_id, seq)

    async def create_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        await self._react(channel_id, message_id, emoji, True)

    async def delete_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        await self._react(channel_id, message_id, emoji, False)

    async def _react(self, channel_id: str, message_id: str, emoji: str, is_add: bool) -> None:
        scene, peer_id = decode_channel_id(channel_id)
        if scene is not Scene.GROUP:
            raise UnsupportedOperation("Reactions are only available in group channels")
        await self.internal.send_group_message_reaction(
            peer_id, parse_numeric_id(message_id, "message id"), emoji, is_add,
        )
