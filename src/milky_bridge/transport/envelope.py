"""
Envelope construction and parsing for action calls.
"""

from typing import Any, Optional

from pydantic import ValidationError

from milky_bridge.errors import RemoteActionError, TransportError
from milky_bridge.models.envelope import ApiResponse


def build_body(params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Build a request body. Parameters left as None are omitted."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None}


def unwrap_response(action: str, raw: Any) -> Any:
    """Unwrap ``{status, retcode, data, message}`` into ``data`` or raise."""
    try:
        envelope = ApiResponse.model_validate(raw)
    except ValidationError as e:
        raise TransportError(f"Malformed response envelope for {action}: {e.error_count()} error(s)", action) from e
    if envelope.status == "failed":
        raise RemoteActionError(action, envelope.message or f"{action} failed", envelope.retcode)
    return envelope.data if envelope.data is not None else {}
