from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from pdf_compressor.api.deps import get_compression_service, get_storage
from pdf_compressor.core.logging import configure_logging
from pdf_compressor.models import CompressResponse, ErrorResponse
from pdf_compressor.services.compression_service import CompressionService
from pdf_compressor.services.exceptions import (
    GHOSTSCRIPT_DOWNLOAD_URL,
    GhostscriptNotFoundError,
    StorageError,
)
from pdf_compressor.storage.local import LocalStorage
from pdf_compressor.utils.file_utils import output_filename

router = APIRouter(prefix="/api", tags=["PDF Compression"])

logger = configure_logging("api")

GENERIC_FAILURE = "تعذر ضغط الملف. يرجى التأكد من أن الملف PDF صالح."
UPLOAD_FAILURE = "تعذر حفظ الملف المرفوع على الخادم."
GHOSTSCRIPT_MISSING = (
    "برنامج Ghostscript غير مثبت. يرجى تثبيته لتفعيل ضغط ملفات PDF: " + GHOSTSCRIPT_DOWNLOAD_URL
)


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    payload = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


@router.post(
    "/compress",
    summary="رفع ملف PDF وضغطه عبر Ghostscript",
    response_model=CompressResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def compress_pdf(
    pdf: Optional[UploadFile] = File(default=None),
    storage: LocalStorage = Depends(get_storage),
    compression_service: CompressionService = Depends(get_compression_service),
):
    try:
        record = await run_in_threadpool(storage.save_upload, pdf) if pdf is not None else None
    except (StorageError, OSError) as exc:
        logger.error("تعذر حفظ الملف المرفوع: %s", exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, UPLOAD_FAILURE, str(exc))

    validation = storage.validate(record)
    if not validation.success:
        if record is not None:
            storage.remove(record.path)
        return error_response(status.HTTP_400_BAD_REQUEST, validation.message)

    filename = output_filename(record.original_name)
    output_path = storage.output_path(filename)

    try:
        result = await compression_service.compress(record.path, output_path)
    except Exception as exc:  # noqa: BLE001
        logger.error("فشل ضغط الملف %s: %s", record.original_name, exc)
        storage.remove(record.path)
        message = GHOSTSCRIPT_MISSING if isinstance(exc, GhostscriptNotFoundError) else GENERIC_FAILURE
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message, str(exc))

    storage.remove(record.path)
    logger.info(
        "اكتمل ضغط الملف %s: %s -> %s (%.1f%%)",
        record.original_name,
        result.original_size,
        result.compressed_size,
        result.compression_ratio,
    )

    return CompressResponse(filename=filename, original_name=record.original_name, **result.model_dump())
