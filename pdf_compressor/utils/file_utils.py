import math
import random
import time
from pathlib import Path

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def trim_number(value: float) -> str:
    """تمثيل رقم بخانتين عشريتين كحد أقصى دون أصفار زائدة (1.50 -> 1.5)."""
    text = f"{math.floor(value * 100 + 0.5) / 100:.2f}"
    return text.rstrip("0").rstrip(".")


def format_bytes(size: int) -> str:
    """تحويل الحجم بالبايت إلى نص مقروء (مثل 2.5 MB) بوحدات ثنائية."""
    if size <= 0:
        return "0 Bytes"
    index = 0
    while index < len(SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1
    return f"{trim_number(size / 1024 ** index)} {SIZE_UNITS[index]}"


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def upload_filename() -> str:
    """اسم فريد لملف مرفوع: طابع زمني بالمللي ثانية مع مكوّن عشوائي."""
    return f"upload-{timestamp_ms()}-{random.randint(0, 10**9)}.pdf"


def output_filename(original_name: str) -> str:
    """اسم الملف الناتج: comp + أول 8 أحرف من الاسم الأصلي + طابع زمني."""
    stem = Path(Path(original_name or "").name).stem
    return f"comp{stem[:8]}-{timestamp_ms()}.pdf"
