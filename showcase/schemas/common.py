"""Common schemas (errors)."""
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response (FastAPI HTTPException body)."""

    detail: str = Field(..., description="Error message")
