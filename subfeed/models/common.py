from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    details: Any = None


class StatusResponse(BaseModel):
    api_key_configured: bool
    message: str
