"""
Wire protocol models — segments, entities, incoming messages and pushed events.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator

MessageScene = Literal["friend", "group", "temp"]


# --- Incoming segments -------------------------------------------------------

class TextData(BaseModel):
    text: str = ""


class MentionData(BaseModel):
    user_id: int


class ReplyData(BaseModel):
    message_seq: int


class ImageData(BaseModel):
    resource_id: Optional[str] = None
    temp_url: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    summary: Optional[str] = None
    sub_type: Optional[str] = None


class RecordData(BaseModel):
    resource_id: Optional[str] = None
    temp_url: str = ""
    duration: Optional[int] = None


class VideoData(BaseModel):
    resource_id: Optional[str] = None
    temp_url: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None


class FileData(BaseModel):
    file_id: str
    file_name: str = ""
    file_size: Optional[int] = None
    file_hash: Optional[str] = None


class TextSegment(BaseModel):
    type: Literal["text"] = "text"
    data: TextData


class MentionSegment(BaseModel):
    type: Literal["mention"] = "mention"
    data: MentionData


class MentionAllSegment(BaseModel):
    type: Literal["mention_all"] = "mention_all"
    data: dict[str, Any] = Field(default_factory=dict)


class ReplySegment(BaseModel):
    type: Literal["reply"] = "reply"
    data: ReplyData


class ImageSegment(BaseModel):
    type: Literal["image"] = "image"
    data: ImageData


class RecordSegment(BaseModel):
    type: Literal["record"] = "record"
    data: RecordData


class VideoSegment(BaseModel):
    type: Literal["video"] = "video"
    data: VideoData


class FileSegment(BaseModel):
    type: Literal["file"] = "file"
    data: FileData


class UnknownSegment(BaseModel):
    """A segment type this adapter does not translate (face, forward, xml, ...)."""
    type: str
    data: dict[str, Any] = Field(default_factory=dict)


Segment = Union[
    TextSegment, MentionSegment, MentionAllSegment, ReplySegment,
    ImageSegment, RecordSegment, VideoSegment, FileSegment, UnknownSegment,
]

SEGMENT_TYPES: dict[str, type[BaseModel]] = {
    "text": TextSegment,
    "mention": MentionSegment,
    "mention_all": MentionAllSegment,
    "reply": ReplySegment,
    "image": ImageSegment,
    "record": RecordSegment,
    "video": VideoSegment,
    "file": FileSegment,
}


def parse_segment(raw: Any) -> Segment:
    if isinstance(raw, BaseModel):
        return raw  # type: ignore[return-value]
    if not isinstance(raw, dict) or not isinstance(raw.get("type"), str):
        raise ValueError(f"segment must be an object with a string type, got {raw!r}")
    model = SEGMENT_TYPES.get(raw["type"], UnknownSegment)
    return model.model_validate({"type": raw["type"], "data": raw.get("data") or {}})  # type: ignore[return-value]


# --- Entities ----------------------------------------------------------------

class FriendCategory(BaseModel):
    category_id: int
    category_name: str = ""


class FriendEntity(BaseModel):
    user_id: int
    nickname: str = ""
    sex: str = "unknown"
    qid: Optional[str] = None
    remark: str = ""
    category: Optional[FriendCategory] = None


class GroupEntity(BaseModel):
    group_id: int
    group_name: str = ""
    member_count: int = 0
    max_member_count: int = 0


class GroupMemberEntity(BaseModel):
    group_id: int
    user_id: int
    nickname: str = ""
    card: str = ""
    title: Optional[str] = None
    sex: str = "unknown"
    level: int = 0
    role: Literal["owner", "admin", "member"] = "member"
    join_time: int = 0
    last_sent_time: int = 0


class LoginInfo(BaseModel):
    uin: int
    nickname: str = ""


class UserProfile(BaseModel):
    nickname: str = ""
    qid: Optional[str] = None
    age: Optional[int] = None
    sex: str = "unknown"
    remark: Optional[str] = None
    bio: Optional[str] = None
    level: Optional[int] = None


class IncomingMessage(BaseModel):
    message_scene: MessageScene
    peer_id: int
    message_seq: int
    sender_id: int
    time: int
    segments: list[Segment] = Field(default_factory=list)
    friend: Optional[FriendEntity] = None
    group: Optional[GroupEntity] = None
    group_member: Optional[GroupMemberEntity] = None

    @field_validator("segments", mode="before")
    @classmethod
    def _parse_segments(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [parse_segment(s) for s in v]
        return v


# --- Pushed events -----------------------------------------------------------

class WireEvent(BaseModel):
    """One frame from the event stream. ``data`` stays raw for passthrough."""
    time: int
    self_id: int
    event_type: str
    data: dict[str, Any] = Field(default_factory=dict)


class MessageRecallData(BaseModel):
    message_scene: MessageScene
    peer_id: int
    message_seq: int
    sender_id: int
    operator_id: Optional[int] = None
    display_suffix: Optional[str] = None


class FriendRequestData(BaseModel):
    initiator_id: int
    initiator_uid: str
    comment: str = ""
    via: Optional[str] = None


class GroupJoinRequestData(BaseModel):
    group_id: int
    notification_seq: int
    is_filtered: bool = False
    initiator_id: int
    comment: str = ""


class GroupInvitedJoinRequestData(BaseModel):
    group_id: int
    notification_seq: int
    initiator_id: int
    target_user_id: int


class GroupInvitationData(BaseModel):
    group_id: int
    invitation_seq: int
    initiator_id: int


class GroupMemberChangeData(BaseModel):
    group_id: int
    user_id: int
    operator_id: Optional[int] = None
    invitor_id: Optional[int] = None
