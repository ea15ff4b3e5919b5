"""
Inbound decoding — wire messages and entities into the universal model.

Segments are decoded one at a time in order. A ``reply`` segment emits no
element; the referenced message is fetched and attached as ``quote``. When
that fetch fails the quote is left out and the message is still delivered.
"""

import logging
from typing import Awaitable, Callable, Optional


from milky_bridge.errors import ResolutionFailure, TransportError
from milky_bridge.identity import Scene, guild_and_channel
from milky_bridge.internal import Internal
from milky_bridge.models.universal import (
    At, AtAll, Audio, Channel, ChannelType, Element, File, Guild, GuildMember, Image,
    Login, Message, Text, User, Video, render_elements,
)
from milky_bridge.models.wire import (
    FileSegment, FriendEntity, GroupEntity, GroupMemberEntity, ImageSegment, IncomingMessage,
    LoginInfo, MentionAllSegment, MentionSegment, RecordSegment, ReplySegment, Segment,
    TextSegment, UnknownSegment, UserProfile, VideoSegment,
)

logger = logging.getLogger(__name__)

FetchMessage = Callable[[str, str], Awaitable[Message]]


def user_avatar(user_id: int) -> str:
    return f"https://q.qlogo.cn/headimg_dl?dst_uin={user_id}&spec=640"


def group_avatar(group_id: int) -> str:
    return f"https://p.qlogo.cn/gh/{group_id}/{group_id}/640"


def decode_group_channel(group: GroupEntity) -> Channel:
    return Channel(id=str(group.group_id), type=ChannelType.TEXT, name=group.group_name)


def decode_private_channel(profile: UserProfile, channel_id: str) -> Channel:
    return Channel(id=channel_id, type=ChannelType.DIRECT, name=profile.nickname)


def decode_guild(group: GroupEntity) -> Guild:
    return Guild(id=str(group.group_id), name=group.group_name, avatar=group_avatar(group.group_id))


def decode_guild_member(member: GroupMemberEntity) -> GuildMember:
    return GuildMember(
        user=User(id=str(member.user_id), name=member.nickname, avatar=user_avatar(member.user_id)),
        nick=member.card or member.nickname,
        avatar=user_avatar(member.user_id),
        joined_at=member.join_time * 1000,
        roles=[member.role],
    )


def decode_user(profile: UserProfile, user_id: int) -> User:
    return User(id=str(user_id), name=profile.nickname, avatar=user_avatar(user_id))


def decode_friend(friend: FriendEntity) -> User:
    return User(id=str(friend.user_id), name=friend.nickname, avatar=user_avatar(friend.user_id))


def decode_login_user(info: LoginInfo) -> Login:
    return Login(
        user=User(id=str(info.uin), name=info.nickname, avatar=user_avatar(info.uin)),
        self_id=str(info.uin),
    )


class MessageDecoder:
    """Decode IncomingMessage into Message.

    ``fetch_message(channel_id, message_id)`` resolves reply targets; file
    download URLs are resolved through ``internal``.
    """

    def __init__(self, internal: Internal, fetch_message: FetchMessage):
        self._internal = internal
        self._fetch_message = fetch_message

    async def decode(self, input: IncomingMessage) -> Message:
        scene = Scene(input.message_scene)
        guild_id, channel_id = guild_and_channel(scene, input.peer_id)

        elements: list[Element] = []
        quote: Optional[Message] = None
        for segment in input.segments:
            if isinstance(segment, ReplySegment):
                try:
                    quote = await self._resolve_quote(channel_id, segment)
                except ResolutionFailure as e:
                    logger.warning("Dropping quote of message %s: %s", input.message_seq, e)
                continue
            element = await self._decode_segment(input, segment)
            if element is not None:
                elements.append(element)

        channel_name: Optional[str] = None
        user_name: Optional[str] = None
        guild: Optional[Guild] = None
        member: Optional[GuildMember] = None
        if scene is Scene.GROUP:
            if input.group is not None:
                guild = decode_guild(input.group)
                channel_name = input.group.group_name
            else:
                guild = Guild(id=guild_id, avatar=group_avatar(input.peer_id))
            if input.group_member is not None:
                member = decode_guild_member(input.group_member)
                user_name = input.group_member.nickname
        elif input.friend is not None:
            channel_name = input.friend.nickname
            user_name = input.friend.nickname

        return Message(
            id=str(input.message_seq),
            elements=elements,
            content=render_elements(elements),
            quote=quote,
            timestamp=input.time * 1000,
            channel=Channel(
                id=channel_id,
                type=ChannelType.TEXT if scene is Scene.GROUP else ChannelType.DIRECT,
                name=channel_name,
            ),
            guild=guild,
            user=User(id=str(input.sender_id), name=user_name, avatar=user_avatar(input.sender_id)),
            member=member,
        )

    async def _resolve_quote(self, channel_id: str, segment: ReplySegment) -> Message:
        message_id = str(segment.data.message_seq)
        try:
            return await self._fetch_message(channel_id, message_id)
        except Exception as e:
            raise ResolutionFailure(str(e) or type(e).__name__, channel_id, message_id) from e

    async def _decode_segment(self, input: IncomingMessage, segment: Segment) -> Optional[Element]:
        if isinstance(segment, TextSegment):
            return Text(content=segment.data.text)
        if isinstance(segment, MentionSegment):
            return At(id=str(segment.data.user_id))
        if isinstance(segment, MentionAllSegment):
            return AtAll()
        if isinstance(segment, ImageSegment):
            return Image(src=segment.data.temp_url, width=segment.data.width, height=segment.data.height)
        if isinstance(segment, RecordSegment):
            return Audio(src=segment.data.temp_url, duration=segment.data.duration)
        if isinstance(segment, VideoSegment):
            return Video(
                src=segment.data.temp_url,
                width=segment.data.width,
                height=segment.data.height,
                duration=segment.data.duration,
            )
        if isinstance(segment, FileSegment):
            return File(src=await self._file_url(input, segment), title=segment.data.file_name)
        if isinstance(segment, UnknownSegment):
            logger.debug("Skipping %s segment in message %s", segment.type, input.message_seq)
            return None
        raise TypeError(f"Unhandled segment model {type(segment).__name__}")

    async def _file_url(self, input: IncomingMessage, segment: FileSegment) -> str:
        data = segment.data
        if data.file_hash:
            action = "get_private_file_download_url"
            result = await self._internal.get_private_file_download_url(input.peer_id, data.file_id, data.file_hash)
        else:
            action = "get_group_file_download_url"
            result = await self._internal.get_group_file_download_url(input.peer_id, data.file_id)
        url = result.get("download_url")
        if not url:
            raise TransportError(f"No download_url for file {data.file_id!r}", action=action)
        return url
