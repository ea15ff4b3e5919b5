"""
Universal model — platform-agnostic channels, guilds, users, messages and
sessions handed to the host, plus the rich-content element tree.

All payloads are frozen; the host decides how to dispatch them.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Generic, Literal, Optional, TypeVar, Union
from pydantic import BaseModel, Field

PLATFORM = "milky"

T = TypeVar("T")


# --- Elements ----------------------------------------------------------------

class Element(BaseModel):
    model_config = {"frozen": True}

    type: str
    children: list[Element] = Field(default_factory=list)

    def render(self) -> str:
        return "".join(child.render() for child in self.children)

    def __str__(self) -> str:
        return self.render()


class Text(Element):
    type: Literal["text"] = "text"
    content: str = ""

    def render(self) -> str:
        return self.content


class At(Element):
    """Mention of one user."""
    type: Literal["at"] = "at"
    id: str
    name: Optional[str] = None

    def render(self) -> str:
        return f"@{self.id}"


class AtAll(Element):
    type: Literal["at_all"] = "at_all"

    def render(self) -> str:
        return "@all"


class Image(Element):
    type: Literal["img"] = "img"
    src: str
    width: Optional[int] = None
    height: Optional[int] = None

    def render(self) -> str:
        return "[image]"


class Audio(Element):
    type: Literal["audio"] = "audio"
    src: str
    duration: Optional[int] = None

    def render(self) -> str:
        return "[audio]"


class Video(Element):
    type: Literal["video"] = "video"
    src: str
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None

    def render(self) -> str:
        return "[video]"


class File(Element):
    type: Literal["file"] = "file"
    src: str
    title: Optional[str] = None

    def render(self) -> str:
        return f"[file:{self.title}]" if self.title else "[file]"


class Quote(Element):
    """Back-reference to another message in the same channel."""
    type: Literal["quote"] = "quote"
    id: str

    def render(self) -> str:
        return ""


class Fragment(Element):
    """Any other element; only its children carry content."""
    attrs: dict[str, Any] = Field(default_factory=dict)


Content = Union[str, Element, list[Union[str, Element]]]


def normalize_content(content: Content) -> list[Element]:
    """Turn a string, element or mixed list into a flat element list."""
    if isinstance(content, str):
        return [Text(content=content)] if content else []
    if isinstance(content, Element):
        return [content]
    elements: list[Element] = []
    for item in content:
        elements.extend(normalize_content(item))
    return elements


def render_elements(elements: list[Element]) -> str:
    return "".join(e.render() for e in elements)


# --- Entities ----------------------------------------------------------------

class ChannelType(IntEnum):
    TEXT = 0
    DIRECT = 1


class Channel(BaseModel):
    model_config = {"frozen": True}

    id: str
    type: ChannelType
    name: Optional[str] = None


class Guild(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class User(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class GuildMember(BaseModel):
    model_config = {"frozen": True}

    user: Optional[User] = None
    nick: Optional[str] = None
    avatar: Optional[str] = None
    joined_at: Optional[int] = None  # epoch ms
    roles: list[str] = Field(default_factory=list)


class Login(BaseModel):
    model_config = {"frozen": True}

    user: User
    self_id: str
    platform: str = PLATFORM


class Message(BaseModel):
    model_config = {"frozen": True}

    id: str
    elements: list[Element] = Field(default_factory=list)
    content: str = ""
    quote: Optional[Message] = None
    timestamp: Optional[int] = None  # epoch ms
    channel: Optional[Channel] = None
    guild: Optional[Guild] = None
    user: Optional[User] = None
    member: Optional[GuildMember] = None


class PagedList(BaseModel, Generic[T]):
    data: list[T] = Field(default_factory=list)
    next: Optional[str] = None


# --- Host-bound events -------------------------------------------------------

class Session(BaseModel):
    """A classified event: message, recall, request or membership change."""

    model_config = {"frozen": True}

    type: str
    self_id: str
    platform: str = PLATFORM
    timestamp: Optional[int] = None  # epoch ms
    user: Optional[User] = None
    channel: Optional[Channel] = None
    guild: Optional[Guild] = None
    member: Optional[GuildMember] = None
    message: Optional[Message] = None
    operator: Optional[User] = None
    raw: Optional[dict[str, Any]] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    @property
    def channel_id(self) -> Optional[str]:
        return self.channel.id if self.channel else None

    @property
    def guild_id(self) -> Optional[str]:
        return self.guild.id if self.guild else None

    @property
    def message_id(self) -> Optional[str]:
        return self.message.id if self.message else None

    @property
    def content(self) -> str:
        return self.message.content if self.message else ""

    @property
    def is_direct(self) -> bool:
        return self.channel is not None and self.channel.type == ChannelType.DIRECT


class RawEvent(BaseModel):
    """Undecoded passthrough of one wire event, e.g. ``milky/group-member-increase``."""

    model_config = {"frozen": True}

    type: str
    self_id: str
    data: dict[str, Any] = Field(default_factory=dict)


HostEvent = Union[RawEvent, Session]
