"""
Bot configuration — endpoint, token and transport settings.
"""

import os
from typing import Optional
from urllib.parse import urlencode, urlsplit

from pydantic import BaseModel, Field, field_validator

DEFAULT_ENDPOINT = "http://127.0.0.1:3000/"
DEFAULT_TIMEOUT_S = 30.0


class BotConfig(BaseModel):
    endpoint: str = DEFAULT_ENDPOINT
    token: Optional[str] = None
    headers: dict[str, str] = Field(default_factory=dict)
    # Handed to the HTTP transport; the adapter itself never times out a call.
    timeout: Optional[float] = DEFAULT_TIMEOUT_S

    @field_validator("token")
    @classmethod
    def _blank_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("endpoint")
    @classmethod
    def _endpoint_has_scheme(cls, v: str) -> str:
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"endpoint must be an http(s) URL, got {v!r}")
        return v

    @property
    def api_base(self) -> str:
        return f"{self.endpoint.rstrip('/')}/api"

    @property
    def event_url(self) -> str:
        parts = urlsplit(self.endpoint)
        scheme = "wss" if parts.scheme == "https" else "ws"
        url = f"{scheme}://{parts.netloc}/event"
        if self.token:
            url += "?" + urlencode({"access_token": self.token})
        return url

    def request_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        headers.update(self.headers)
        return headers

    @classmethod
    def from_env(cls, **overrides: object) -> "BotConfig":
        values: dict[str, object] = {}
        if os.environ.get("MILKY_ENDPOINT"):
            values["endpoint"] = os.environ["MILKY_ENDPOINT"]
        if os.environ.get("MILKY_TOKEN"):
            values["token"] = os.environ["MILKY_TOKEN"]
        if os.environ.get("MILKY_TIMEOUT"):
            values["timeout"] = float(os.environ["MILKY_TIMEOUT"])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
