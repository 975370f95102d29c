GHOSTSCRIPT_NOT_FOUND = "Ghostscript not found"
GHOSTSCRIPT_DOWNLOAD_URL = "https://www.ghostscript.com/download/gsdnld.html"


class CompressionError(Exception):
    """فشل عام أثناء استدعاء Ghostscript أو قياس الملفات."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class GhostscriptNotFoundError(CompressionError):
    """لم يُعثر على أي ملف تنفيذي صالح لـ Ghostscript."""

    def __init__(self, stderr: str = "") -> None:
        super().__init__(
            f"{GHOSTSCRIPT_NOT_FOUND}. Please install Ghostscript and ensure it is in your PATH. "
            f"Visit {GHOSTSCRIPT_DOWNLOAD_URL}",
            stderr=stderr,
        )


class CompressionTimeoutError(CompressionError):
    pass


class StorageError(Exception):
    pass
