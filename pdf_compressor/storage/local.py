from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from pdf_compressor.core.config import Settings, get_settings
from pdf_compressor.core.logging import configure_logging
from pdf_compressor.models import FileSize, UploadRecord, ValidationResult
from pdf_compressor.services.exceptions import StorageError
from pdf_compressor.utils.file_utils import format_bytes, trim_number, upload_filename

logger = configure_logging("storage")


class LocalStorage:
    """إدارة مجلدي الرفع والملفات المضغوطة: التحقق، القياس، والتنظيف."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.settings.configure_paths()
        self.upload_dir = Path(self.settings.upload_dir)
        self.compressed_dir = Path(self.settings.compressed_dir)
        self.max_file_age = self.settings.max_file_age

    def initialize(self) -> None:
        """إنشاء مجلدي التخزين إن لم يكونا موجودين."""
        try:
            for directory in (self.upload_dir, self.compressed_dir):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("تعذر إنشاء مجلدات التخزين")
            raise
        logger.info("تمت تهيئة مجلدات التخزين")

    # ------------------------------------------------------------------
    # الرفع والتحقق
    # ------------------------------------------------------------------
    def save_upload(self, upload: UploadFile) -> UploadRecord:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target_path = self.upload_dir / upload_filename()
        upload.file.seek(0)
        try:
            with target_path.open("wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
        except OSError as exc:
            target_path.unlink(missing_ok=True)
            raise StorageError(f"Error saving upload: {exc}") from exc
        return UploadRecord(
            path=target_path,
            media_type=(upload.content_type or "").lower(),
            size=target_path.stat().st_size,
            original_name=upload.filename or target_path.name,
        )

    def validate(self, record: Optional[UploadRecord]) -> ValidationResult:
        if record is None:
            return ValidationResult(success=False, message="لم يتم رفع أي ملف.")

        if record.media_type not in self.settings.allowed_mime_types:
            return ValidationResult(success=False, message="يُسمح بملفات PDF فقط.")

        if record.size > self.settings.max_file_size:
            limit = trim_number(self.settings.max_file_size_mb)
            return ValidationResult(success=False, message=f"حجم الملف يتجاوز الحد المسموح ({limit} MB).")

        return ValidationResult(success=True, message="الملف صالح.")

    # ------------------------------------------------------------------
    # الأحجام والمسارات
    # ------------------------------------------------------------------
    def size_of(self, path: Path) -> FileSize:
        try:
            size = Path(path).stat().st_size
        except OSError as exc:
            raise StorageError(f"Error getting file size: {exc}") from exc
        return FileSize(bytes=size, formatted=format_bytes(size))

    def output_path(self, filename: str) -> Path:
        return self.compressed_dir / filename

    def resolve_download(self, filename: str) -> Optional[Path]:
        """مسار ملف مضغوط موجود، أو None إذا كان الاسم غير صالح أو الملف غير موجود."""
        if not filename or Path(filename).name != filename or filename in {".", ".."}:
            return None
        path = self.output_path(filename)
        return path if self.exists(path) else None

    @staticmethod
    def exists(path: Path) -> bool:
        return Path(path).is_file()

    # ------------------------------------------------------------------
    # الحذف والتنظيف
    # ------------------------------------------------------------------
    def remove(self, path: Path) -> bool:
        """حذف ملف دون رفع أي استثناء؛ يُسجَّل الفشل فقط."""
        try:
            Path(path).unlink()
        except OSError as exc:
            logger.error("تعذر حذف الملف %s: %s", path, exc)
            return False
        logger.info("تم حذف الملف: %s", Path(path).name)
        return True

    def sweep_expired(self, now: Optional[float] = None) -> int:
        """حذف الملفات التي تجاوز عمرها max_file_age من المجلدين."""
        now = time.time() if now is None else now
        removed = 0
        for directory in (self.upload_dir, self.compressed_dir):
            removed += self._sweep_directory(directory, now)
        if removed:
            logger.info("تم تنظيف %d ملف/ملفات قديمة", removed)
        return removed

    def _sweep_directory(self, directory: Path, now: float) -> int:
        count = 0
        try:
            entries = list(directory.iterdir())
        except FileNotFoundError:
            return 0

        for path in entries:
            if path.is_dir():
                continue
            try:
                age = now - path.stat().st_mtime
                if age > self.max_file_age:
                    path.unlink()
                    count += 1
            except FileNotFoundError:
                # حُذف الملف أثناء التنظيف أو رابط رمزي معطوب
                continue
        return count
