from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_ghostscript_options() -> Dict[str, Union[bool, str]]:
    return {
        "dCompatibilityLevel": "1.4",
        "dNOPAUSE": True,
        "dBATCH": True,
        "dSAFER": True,
        "dCompressFonts": True,
        "dCompressPages": True,
        "dOptimize": True,
        "dEmbedAllFonts": True,
        "dSubsetFonts": True,
        "dAutoRotatePages": "/None",
        "dColorImageDownsampleType": "/Bicubic",
        "dGrayImageDownsampleType": "/Bicubic",
    }


class Settings(BaseSettings):
    """إعدادات خدمة الضغط مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "PDF Compressor"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    host: str = "localhost"
    port: int = 3000

    # === الرفع ===
    max_file_size: int = 250 * 1024 * 1024
    allowed_mime_types: List[str] = Field(default_factory=lambda: ["application/pdf"])

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    upload_dir: Optional[Path] = None
    compressed_dir: Optional[Path] = None

    # === التنظيف الدوري (بالثواني) ===
    cleanup_enabled: bool = True
    max_file_age: float = 60 * 60
    cleanup_interval: float = 15 * 60

    # === Ghostscript ===
    # مسار يدوي اختياري، مثال على ويندوز: C:\Program Files\gs\gs10.02.1\bin\gswin64c.exe
    ghostscript_path: Optional[str] = None
    # /screen (72 dpi) | /ebook (150 dpi) | /printer (300 dpi) | /prepress
    default_quality: str = "/ebook"
    ghostscript_options: Dict[str, Union[bool, str]] = Field(default_factory=_default_ghostscript_options)
    ghostscript_timeout: Optional[float] = 300

    # === التنزيل ===
    delete_after_download: bool = True
    delete_failed_downloads: bool = True

    allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    def configure_paths(self) -> None:
        """تهيئة المسارات الافتراضية لمجلدي الرفع والملفات المضغوطة."""
        self.upload_dir = (self.upload_dir or (self.base_dir / "uploads")).resolve()
        self.compressed_dir = (self.compressed_dir or (self.base_dir / "compressed")).resolve()

    @property
    def max_file_size_mb(self) -> float:
        return self.max_file_size / (1024 * 1024)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
