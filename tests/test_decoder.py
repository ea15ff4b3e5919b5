"""Inbound decoding of wire messages."""

import logging

import pytest

from milky_bridge import TransportError
from milky_bridge.models.universal import At, AtAll, Audio, ChannelType, File, Image, Text, Video
from milky_bridge.models.wire import IncomingMessage

from conftest import failed, make_message, text


async def decode(bot, raw):
    return await bot.decoder.decode(IncomingMessage.model_validate(raw))


@pytest.mark.asyncio
async def test_text_and_mentions(bot, server):
    raw = make_message([text("hi "), {"type": "mention", "data": {"user_id": 42}}, text("!")])
    message = await decode(bot, raw)

    assert message.elements == [Text(content="hi "), At(id="42"), Text(content="!")]
    assert message.content == "hi @42!"
    assert message.quote is None
    assert message.id == "100"
    assert server.calls == []


@pytest.mark.asyncio
async def test_mention_all(bot):
    message = await decode(bot, make_message([{"type": "mention_all", "data": {}}, text(" meeting")]))
    assert isinstance(message.elements[0], AtAll)
    assert message.content == "@all meeting"


@pytest.mark.asyncio
async def test_reply_resolves_quote(bot, server):
    server.route("get_message", {"message": make_message([text("original")], seq=7, sender_id=30)})
    raw = make_message([{"type": "reply", "data": {"message_seq": 7}}, text("agreed")])
    message = await decode(bot, raw)

    assert message.quote is not None
    assert message.quote.id == "7"
    assert message.quote.content == "original"
    assert message.elements == [Text(content="agreed")]
    assert message.content == "agreed"
    assert server.body("get_message") == {"message_scene": "group", "peer_id": 10, "message_seq": 7}


@pytest.mark.asyncio
async def test_reply_failure_omits_quote(bot, server, caplog):
    server.route("get_message", envelope=failed("message not found"))
    raw = make_message([{"type": "reply", "data": {"message_seq": 7}}, text("still here")])
    with caplog.at_level(logging.WARNING, logger="milky_bridge.decoder"):
        message = await decode(bot, raw)

    assert message.quote is None
    assert message.content == "still here"
    assert "message not found" in caplog.text


@pytest.mark.asyncio
async def test_reply_transport_failure_omits_quote(bot, server):
    # no route -> HTTP 404 -> TransportError
    raw = make_message([{"type": "reply", "data": {"message_seq": 7}}])
    message = await decode(bot, raw)
    assert message.quote is None
    assert message.elements == []


@pytest.mark.asyncio
async def test_group_context(bot):
    message = await decode(bot, make_message([text("x")]))

    assert message.channel.id == "10"
    assert message.channel.type == ChannelType.TEXT
    assert message.channel.name == "Test Group"
    assert message.guild.id == "10"
    assert message.guild.name == "Test Group"
    assert message.guild.avatar == "https://p.qlogo.cn/gh/10/10/640"
    assert message.member.nick == "Alice (admin)"
    assert message.member.joined_at == 1_600_000_000_000
    assert message.member.avatar == "https://q.qlogo.cn/headimg_dl?dst_uin=20&spec=640"
    assert message.member.roles == ["admin"]
    assert message.user.id == "20"
    assert message.user.name == "alice"
    assert message.timestamp == 1_700_000_000_000


@pytest.mark.asyncio
async def test_member_nick_falls_back_to_nickname(bot):
    raw = make_message([text("x")])
    raw["group_member"]["card"] = ""
    message = await decode(bot, raw)
    assert message.member.nick == "alice"


@pytest.mark.asyncio
async def test_friend_context(bot):
    message = await decode(bot, make_message([text("x")], scene="friend", peer_id=20))

    assert message.channel.id == "private:20"
    assert message.channel.type == ChannelType.DIRECT
    assert message.channel.name == "bob"
    assert message.user.name == "bob"
    assert message.guild is None
    assert message.member is None


@pytest.mark.asyncio
async def test_temp_context(bot):
    message = await decode(bot, make_message([text("x")], scene="temp", peer_id=20))

    assert message.channel.id == "private:temp_20"
    assert message.channel.type == ChannelType.DIRECT
    assert message.guild is None
    assert message.member is None


@pytest.mark.asyncio
async def test_media_segments(bot):
    raw = make_message([
        {"type": "image", "data": {"resource_id": "r1", "temp_url": "https://cdn/img", "width": 640, "height": 480}},
        {"type": "record", "data": {"resource_id": "r2", "temp_url": "https://cdn/rec", "duration": 3}},
        {"type": "video", "data": {"resource_id": "r3", "temp_url": "https://cdn/vid", "width": 1, "height": 2, "duration": 9}},
    ])
    message = await decode(bot, raw)

    assert message.elements == [
        Image(src="https://cdn/img", width=640, height=480),
        Audio(src="https://cdn/rec", duration=3),
        Video(src="https://cdn/vid", width=1, height=2, duration=9),
    ]
    assert message.content == "[image][audio][video]"


@pytest.mark.asyncio
async def test_private_file_uses_hash(bot, server):
    server.route("get_private_file_download_url", {"download_url": "https://files/p"})
    raw = make_message(
        [{"type": "file", "data": {"file_id": "f1", "file_name": "a.txt", "file_size": 3, "file_hash": "h"}}],
        scene="friend", peer_id=20,
    )
    message = await decode(bot, raw)

    assert message.elements == [File(src="https://files/p", title="a.txt")]
    assert server.body("get_private_file_download_url") == {"user_id": 20, "file_id": "f1", "file_hash": "h"}


@pytest.mark.asyncio
async def test_group_file_without_hash(bot, server):
    server.route("get_group_file_download_url", {"download_url": "https://files/g"})
    raw = make_message([{"type": "file", "data": {"file_id": "f2", "file_name": "b.zip", "file_size": 9}}])
    message = await decode(bot, raw)

    assert message.elements == [File(src="https://files/g", title="b.zip")]
    assert server.body("get_group_file_download_url") == {"group_id": 10, "file_id": "f2"}


@pytest.mark.asyncio
async def test_unknown_segments_are_skipped(bot):
    raw = make_message([{"type": "face", "data": {"face_id": "14"}}, text("ok")])
    message = await decode(bot, raw)
    assert message.elements == [Text(content="ok")]


@pytest.mark.asyncio
async def test_element_order_follows_segments(bot, server):
    server.route("get_group_file_download_url", {"download_url": "https://files/g"})
    raw = make_message([
        {"type": "file", "data": {"file_id": "f", "file_name": "n"}},
        text("a"),
        {"type": "image", "data": {"temp_url": "https://cdn/i"}},
        text("b"),
    ])
    message = await decode(bot, raw)
    assert [e.type for e in message.elements] == ["file", "text", "img", "text"]
    assert message.content == "[file:n]a[image]b"


@pytest.mark.asyncio
@pytest.mark.parametrize("envelope", [
    {"status": "ok", "retcode": 0, "data": None},
    {"status": "ok", "retcode": 0, "data": {}},
    {"status": "ok", "retcode": 0, "data": {"message": None}},
])
async def test_reply_to_missing_message_omits_quote(bot, server, envelope, caplog):
    server.route("get_message", envelope=envelope)
    raw = make_message([{"type": "reply", "data": {"message_seq": 7}}, text("hi")])
    with caplog.at_level(logging.WARNING, logger="milky_bridge.decoder"):
        message = await decode(bot, raw)

    assert message.quote is None
    assert message.content == "hi"
    assert "Dropping quote of message 100" in caplog.text


@pytest.mark.asyncio
async def test_reply_to_message_with_unresolvable_file_omits_quote(bot, server):
    quoted = make_message([{"type": "file", "data": {"file_id": "f", "file_name": "n"}}], seq=7)
    server.route("get_message", {"message": quoted})
    server.route("get_group_file_download_url", {})
    raw = make_message([{"type": "reply", "data": {"message_seq": 7}}, text("hi")])
    message = await decode(bot, raw)

    assert message.quote is None
    assert message.content == "hi"
    assert server.actions == ["get_message", "get_group_file_download_url"]


@pytest.mark.asyncio
async def test_file_without_download_url(bot, server):
    server.route("get_group_file_download_url", {})
    raw = make_message([{"type": "file", "data": {"file_id": "f", "file_name": "n"}}])
    with pytest.raises(TransportError, match="No download_url") as exc:
        await decode(bot, raw)
    assert exc.value.action == "get_group_file_download_url"
