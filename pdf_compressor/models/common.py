from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class UploadRecord(BaseModel):
    path: Path
    media_type: str
    size: int
    original_name: str


class ValidationResult(BaseModel):
    success: bool
    message: str


class FileSize(BaseModel):
    bytes: int
    formatted: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
