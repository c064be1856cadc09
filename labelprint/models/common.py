"""
Common Pydantic models shared across the application.
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response model."""

    status: Literal["error"] = "error"
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict | str | None = Field(None, description="Additional error context")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    request_id: str | None = Field(None, description="Unique request identifier")


class PrinterProfile(BaseModel):
    """Label size preset offered by the designer."""

    id: str
    name: str
    width_mm: float = Field(..., alias="widthMm", gt=0)
    height_mm: float = Field(..., alias="heightMm", gt=0)
    description: str

    model_config = {"populate_by_name": True}


PRINTER_PROFILES: list[PrinterProfile] = [
    PrinterProfile(id="brady-50x25", name="Brady 50x25", widthMm=50, heightMm=25, description="Standard small label"),
    PrinterProfile(id="brady-100x25", name="Brady 100x25", widthMm=100, heightMm=25, description="Wide small label"),
    PrinterProfile(id="brady-50x50", name="Brady 50x50", widthMm=50, heightMm=50, description="Square label"),
    PrinterProfile(id="brady-100x50", name="Brady 100x50", widthMm=100, heightMm=50, description="Wide medium label"),
    PrinterProfile(id="brady-100x75", name="Brady 100x75", widthMm=100, heightMm=75, description="Large label"),
    PrinterProfile(id="brady-150x50", name="Brady 150x50", widthMm=150, heightMm=50, description="Extra wide label"),
    PrinterProfile(id="brady-150x100", name="Brady 150x100", widthMm=150, heightMm=100, description="Large wide label"),
]
