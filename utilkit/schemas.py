"""
Pydantic models shared by the request helpers and the FastAPI integration.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RequestSummary(BaseModel):
    """Summary of an inbound request."""
    method: str = Field(..., description="Upper-cased HTTP method")
    content_type: Optional[str] = Field(default=None, description="Supported content type, if any")
    client_ip: Optional[str] = Field(default=None, description="Validated client address")
    is_ajax: bool = False
    is_https: bool = False


class ErrorResponse(BaseModel):
    """Error response from API."""
    error: str
    detail: Optional[str] = None
    status_code: Optional[int] = None
    timestamp: datetime = Field(default_factory=datetime.now)
