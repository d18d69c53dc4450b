from pydantic import BaseModel, Field
from typing import Optional, Any, Literal

from .errors import NotionPostsError

class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Application-specific error code")
    details: Optional[Any] = Field(None, description="Additional error details")

    @classmethod
    def from_error(cls, exc: NotionPostsError) -> "ErrorResponse":
        return cls(message=str(exc), error_code=exc.code, details=exc.details or None)
