from .common import ErrorResponse, FileSize, UploadRecord, ValidationResult
from .compress import CompressionResult, CompressResponse

__all__ = [
    "CompressionResult",
    "CompressResponse",
    "ErrorResponse",
    "FileSize",
    "UploadRecord",
    "ValidationResult",
]
