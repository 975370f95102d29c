from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse
from starlette.types import Receive, Scope, Send

from pdf_compressor.api.compress import error_response
from pdf_compressor.api.deps import get_app_settings, get_storage
from pdf_compressor.core.config import Settings
from pdf_compressor.core.logging import configure_logging
from pdf_compressor.models import ErrorResponse
from pdf_compressor.storage.local import LocalStorage

router = APIRouter(prefix="/api", tags=["Files"])

logger = configure_logging("api")


class DeletingFileResponse(FileResponse):
    """استجابة ملف تحذف الملف من الخادم بعد انتهاء النقل."""

    def __init__(
        self,
        path: Path,
        *,
        storage: LocalStorage,
        delete_on_success: bool = True,
        delete_on_failure: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(path, **kwargs)
        self.storage = storage
        self.delete_on_success = delete_on_success
        self.delete_on_failure = delete_on_failure

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except (Exception, asyncio.CancelledError):
            logger.error("انقطع تنزيل الملف %s", Path(self.path).name)
            if self.delete_on_failure:
                self.storage.remove(Path(self.path))
            raise

        if self.delete_on_success:
            self.storage.remove(Path(self.path))


@router.get(
    "/download/{filename}",
    summary="تنزيل ملف مضغوط ثم حذفه من الخادم",
    responses={404: {"model": ErrorResponse}},
)
async def download_file(
    filename: str,
    storage: LocalStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    path = storage.resolve_download(filename)
    if path is None:
        return error_response(status.HTTP_404_NOT_FOUND, "الملف غير موجود.")

    return DeletingFileResponse(
        path,
        storage=storage,
        delete_on_success=settings.delete_after_download,
        delete_on_failure=settings.delete_failed_downloads,
        filename=filename,
        media_type="application/pdf",
    )
