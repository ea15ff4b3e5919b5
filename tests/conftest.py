"""Shared fixtures: a fake action server behind httpx.MockTransport."""

import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from milky_bridge import BotConfig, MilkyBot

Route = Union[dict[str, Any], Callable[[dict[str, Any]], Any]]


def ok(data: Any = None) -> dict[str, Any]:
    return {"status": "ok", "retcode": 0, "data": data if data is not None else {}}


def failed(message: str, retcode: int = -1) -> dict[str, Any]:
    return {"status": "failed", "retcode": retcode, "data": None, "message": message}


class FakeServer:
    """Answers POST /api/<action> from a route table and records every call."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.requests: list[httpx.Request] = []

    def route(self, action: str, data: Any = None, *, envelope: Optional[dict[str, Any]] = None) -> None:
        self.routes[action] = envelope if envelope is not None else ok(data)

    def route_with(self, action: str, fn: Callable[[dict[str, Any]], Any]) -> None:
        self.routes[action] = fn

    @property
    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]

    def body(self, action: str) -> dict[str, Any]:
        return next(body for name, body in self.calls if name == action)

    def handler(self, request: httpx.Request) -> httpx.Response:
        action = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        self.calls.append((action, body))
        self.requests.append(request)
        route = self.routes.get(action)
        if route is None:
            return httpx.Response(404, text=f"no route for {action}")
        result = route(body) if callable(route) else route
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)


def make_message(
    segments: list[dict[str, Any]],
    scene: str = "group",
    peer_id: int = 10,
    seq: int = 100,
    sender_id: int = 20,
    time: int = 1_700_000_000,
) -> dict[str, Any]:
    message: dict[str, Any] = {
        "message_scene": scene,
        "peer_id": peer_id,
        "message_seq": seq,
        "sender_id": sender_id,
        "time": time,
        "segments": segments,
    }
    if scene == "group":
        message["group"] = {"group_id": peer_id, "group_name": "Test Group", "member_count": 3, "max_member_count": 200}
        message["group_member"] = {
            "group_id": peer_id, "user_id": sender_id, "nickname": "alice", "card": "Alice (admin)",
            "sex": "female", "level": 5, "role": "admin", "join_time": 1_600_000_000, "last_sent_time": time,
        }
    elif scene == "friend":
        message["friend"] = {"user_id": sender_id, "nickname": "bob", "sex": "male", "remark": ""}
    return message


def text(t: str) -> dict[str, Any]:
    return {"type": "text", "data": {"text": t}}


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def bot(server: FakeServer) -> MilkyBot:
    config = BotConfig(endpoint="http://milky.test/", token="secret")
    return MilkyBot(config, transport=httpx.MockTransport(server.handler))
