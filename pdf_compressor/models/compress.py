from pydantic import BaseModel, ConfigDict, Field


class CompressionResult(BaseModel):
    """نتيجة عملية الضغط كما تُعاد إلى العميل."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    original_size: str = Field(..., alias="originalSize", description="الحجم الأصلي بصيغة مقروءة.")
    compressed_size: str = Field(..., alias="compressedSize", description="الحجم بعد الضغط بصيغة مقروءة.")
    original_bytes: int = Field(..., alias="originalBytes")
    compressed_bytes: int = Field(..., alias="compressedBytes")
    compression_ratio: float = Field(..., alias="compressionRatio", description="نسبة التوفير (%) بخانة عشرية واحدة.")
    saved_bytes: int = Field(..., alias="savedBytes")
    saved_formatted: str = Field(..., alias="savedFormatted")


class CompressResponse(CompressionResult):
    filename: str = Field(..., description="اسم الملف المضغوط المتاح للتنزيل.")
    original_name: str = Field(..., alias="originalName")
