"""Basic unit tests for milky-bridge package."""

from milky_bridge import (
    MilkyBot,
    BotConfig,
    MilkyError,
    RemoteActionError,
    TransportError,
    UnsupportedOperation,
    MalformedIdentifier,
    ResolutionFailure,
    ConnectionError,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert MilkyBot is not None
    assert BotConfig is not None


def test_error_hierarchy():
    for cls in (RemoteActionError, TransportError, UnsupportedOperation,
                MalformedIdentifier, ResolutionFailure, ConnectionError):
        assert issubclass(cls, MilkyError)
    assert issubclass(MalformedIdentifier, ValueError)


def test_error_attributes():
    err = MilkyError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    remote = RemoteActionError("kick_group_member", "permission denied", retcode=403)
    assert remote.code == "remote_error"
    assert remote.retcode == 403
    assert remote.details == {"action": "kick_group_member", "retcode": 403}
    assert str(remote) == "permission denied"


def test_config_defaults():
    config = BotConfig()
    assert config.api_base == "http://127.0.0.1:3000/api"
    assert config.event_url == "ws://127.0.0.1:3000/event"
    assert config.request_headers() == {}


def test_config_token_and_tls():
    config = BotConfig(endpoint="https://bot.example:8443/base/", token="a b", headers={"X-Extra": "1"})
    assert config.event_url == "wss://bot.example:8443/event?access_token=a+b"
    assert config.request_headers() == {"Authorization": "Bearer a b", "X-Extra": "1"}
    assert config.api_base == "https://bot.example:8443/base/api"


def test_config_blank_token_is_unauthenticated():
    config = BotConfig(token="")
    assert config.token is None
    assert "Authorization" not in config.request_headers()
    assert "access_token" not in config.event_url


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("MILKY_ENDPOINT", "http://10.0.0.2:3000/")
    monkeypatch.setenv("MILKY_TOKEN", "tok")
    monkeypatch.setenv("MILKY_TIMEOUT", "5")
    config = BotConfig.from_env()
    assert config.endpoint == "http://10.0.0.2:3000/"
    assert config.token == "tok"
    assert config.timeout == 5.0
    assert BotConfig.from_env(token="override").token == "override"
