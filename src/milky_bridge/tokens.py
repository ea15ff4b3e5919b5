"""
Request tokens.

A pending friend / join / invitation request is exposed to the host as a
single message id string. These models hold the fields the matching
accept/reject action needs and convert to and from that string only at
the host boundary.
"""

from typing import Literal

from pydantic import BaseModel, field_validator

from milky_bridge.errors import MalformedIdentifier
from milky_bridge.identity import parse_numeric_id

SEPARATOR = "|"

GroupRequestKind = Literal["join_request", "invited_join_request"]


def _flag(value: str, token: str) -> bool:
    if value not in ("0", "1"):
        raise MalformedIdentifier(f"filtered flag must be 0 or 1 in request token {token!r}", token)
    return value == "1"


def _split(token: str, count: int, kind: str) -> list[str]:
    if not isinstance(token, str):
        raise MalformedIdentifier(f"{kind} token must be a string, got {token!r}", str(token))
    parts = token.split(SEPARATOR)
    if len(parts) != count:
        raise MalformedIdentifier(f"{kind} token must have {count} fields, got {token!r}", token)
    return parts


class FriendRequestToken(BaseModel):
    """``<initiator_uid>|<is_filtered>``"""

    model_config = {"frozen": True}

    initiator_uid: str
    is_filtered: bool = False

    @field_validator("initiator_uid")
    @classmethod
    def _no_separator(cls, v: str) -> str:
        if not v or SEPARATOR in v:
            raise ValueError(f"initiator uid must be non-empty and must not contain {SEPARATOR!r}")
        return v

    def to_token(self) -> str:
        return f"{self.initiator_uid}{SEPARATOR}{int(self.is_filtered)}"

    @classmethod
    def parse(cls, token: str) -> "FriendRequestToken":
        uid, flag = _split(token, 2, "friend request")
        if not uid:
            raise MalformedIdentifier(f"empty initiator uid in {token!r}", token)
        return cls(initiator_uid=uid, is_filtered=_flag(flag, token))


class GroupRequestToken(BaseModel):
    """``<notification_seq>|<kind>|<group_id>|<is_filtered>``"""

    model_config = {"frozen": True}

    notification_seq: int
    kind: GroupRequestKind
    group_id: int
    is_filtered: bool = False

    def to_token(self) -> str:
        return SEPARATOR.join([
            str(self.notification_seq), self.kind, str(self.group_id), str(int(self.is_filtered)),
        ])

    @classmethod
    def parse(cls, token: str) -> "GroupRequestToken":
        seq, kind, group_id, flag = _split(token, 4, "group request")
        if kind not in ("join_request", "invited_join_request"):
            raise MalformedIdentifier(f"unknown group request kind {kind!r} in {token!r}", token)
        return cls(
            notification_seq=parse_numeric_id(seq, "notification seq"),
            kind=kind,
            group_id=parse_numeric_id(group_id, "group id"),
            is_filtered=_flag(flag, token),
        )


class GroupInvitationToken(BaseModel):
    """``<invitation_seq>|<is_filtered>``"""

    model_config = {"frozen": True}

    invitation_seq: int
    is_filtered: bool = False

    def to_token(self) -> str:
        return f"{self.invitation_seq}{SEPARATOR}{int(self.is_filtered)}"

    @classmethod
    def parse(cls, token: str) -> "GroupInvitationToken":
        seq, flag = _split(token, 2, "group invitation")
        return cls(invitation_seq=parse_numeric_id(seq, "invitation seq"), is_filtered=_flag(flag, token))
