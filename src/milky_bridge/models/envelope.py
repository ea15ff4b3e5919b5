"""
Action response envelope.
"""

from typing import Any, Literal, Optional
from pydantic import BaseModel


class ApiResponse(BaseModel):
    status: Literal["ok", "failed"]
    retcode: int = 0
    data: Optional[Any] = None
    message: Optional[str] = None
