from __future__ import annotations

import asyncio
import math
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from pdf_compressor.core.config import Settings
from pdf_compressor.core.logging import configure_logging
from pdf_compressor.models import CompressionResult
from pdf_compressor.services.exceptions import (
    CompressionError,
    CompressionTimeoutError,
    GhostscriptNotFoundError,
    StorageError,
)
from pdf_compressor.storage.local import LocalStorage
from pdf_compressor.utils.file_utils import format_bytes

logger = configure_logging("ghostscript")


@dataclass(frozen=True)
class GhostscriptCandidate:
    """ملف تنفيذي مرشح لتشغيل Ghostscript ومصدره (configured | path | install)."""

    executable: str
    source: str = "path"


class CompressionService:
    """ضغط ملفات PDF عبر Ghostscript مع البحث عن الملف التنفيذي في عدة مواقع."""

    COMMAND_NAMES = ("gs", "gswin64c", "gswin32c")
    WINDOWS_EXECUTABLES = ("gswin64c.exe", "gswin32c.exe")

    def __init__(
        self,
        storage: LocalStorage | None = None,
        settings: Settings | None = None,
        *,
        platform: str | None = None,
        install_roots: Sequence[Path] | None = None,
    ) -> None:
        self.storage = storage or LocalStorage(settings)
        self.settings = settings or self.storage.settings
        self.quality = self.settings.default_quality
        self.options = dict(self.settings.ghostscript_options)
        self.timeout = self.settings.ghostscript_timeout
        self.platform = platform or sys.platform
        self._install_roots = list(install_roots) if install_roots is not None else None

    # ------------------------------------------------------------------
    # بناء الوسائط
    # ------------------------------------------------------------------
    def build_arguments(self, input_path: Path, output_path: Path) -> List[str]:
        args: List[str] = []
        for key, value in self.options.items():
            if isinstance(value, bool):
                if value:
                    args.append(f"-{key}")
            else:
                args.append(f"-{key}={value}")

        args.extend(
            [
                "-sDEVICE=pdfwrite",
                f"-dPDFSETTINGS={self.quality}",
                f"-sOutputFile={output_path}",
                str(input_path),
            ]
        )
        return args

    # ------------------------------------------------------------------
    # البحث عن Ghostscript
    # ------------------------------------------------------------------
    def install_roots(self) -> List[Path]:
        if self._install_roots is not None:
            return self._install_roots

        roots = [Path("C:\\Program Files\\gs"), Path("C:\\Program Files (x86)\\gs")]
        for variable in ("ProgramFiles", "ProgramFiles(x86)"):
            value = os.environ.get(variable)
            if value:
                roots.append(Path(value) / "gs")
        return roots

    def candidates(self) -> List[GhostscriptCandidate]:
        """قائمة مرتبة بالملفات التنفيذية المرشحة دون تكرار."""
        found: List[GhostscriptCandidate] = []

        if self.settings.ghostscript_path:
            found.append(GhostscriptCandidate(self.settings.ghostscript_path, "configured"))

        found.extend(GhostscriptCandidate(name, "path") for name in self.COMMAND_NAMES)

        if self.platform == "win32":
            for root in self.install_roots():
                try:
                    versions = sorted(root.iterdir()) if root.is_dir() else []
                except OSError:
                    continue
                for version_dir in versions:
                    bin_dir = version_dir / "bin"
                    if not bin_dir.is_dir():
                        continue
                    for executable in self.WINDOWS_EXECUTABLES:
                        found.append(GhostscriptCandidate(str(bin_dir / executable), "install"))

        unique: List[GhostscriptCandidate] = []
        seen: set[str] = set()
        for candidate in found:
            if candidate.executable not in seen:
                seen.add(candidate.executable)
                unique.append(candidate)
        return unique

    # ------------------------------------------------------------------
    # التشغيل
    # ------------------------------------------------------------------
    async def run(
        self,
        args: Sequence[str],
        candidates: Optional[Sequence[GhostscriptCandidate]] = None,
    ) -> GhostscriptCandidate:
        """تجربة المرشحين بالترتيب وإرجاع أول مرشح ينتهي برمز خروج 0."""
        candidates = self.candidates() if candidates is None else list(candidates)
        last_stderr = ""

        for index, candidate in enumerate(candidates):
            is_last = index == len(candidates) - 1
            try:
                returncode, stderr = await self._spawn(candidate, args)
            except FileNotFoundError:
                logger.debug("Ghostscript غير موجود في: %s", candidate.executable)
                continue
            except OSError as exc:
                raise CompressionError(f"Failed to start {candidate.executable}: {exc}") from exc

            if returncode == 0:
                logger.debug("تم تشغيل Ghostscript بنجاح عبر: %s", candidate.executable)
                return candidate

            last_stderr = stderr
            if not is_last:
                logger.warning(
                    "انتهى %s برمز %s، تجربة المرشح التالي", candidate.executable, returncode
                )
                continue

            raise CompressionError(
                f"Ghostscript exited with code {returncode}: {stderr.strip()}",
                stderr=stderr,
            )

        raise GhostscriptNotFoundError(stderr=last_stderr)

    async def _spawn(self, candidate: GhostscriptCandidate, args: Sequence[str]) -> tuple[int, str]:
        process = await asyncio.create_subprocess_exec(
            candidate.executable,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise CompressionTimeoutError(
                f"Ghostscript timed out after {self.timeout} seconds ({candidate.executable})"
            ) from exc
        return process.returncode, stderr.decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # الضغط
    # ------------------------------------------------------------------
    async def compress(self, input_path: Path, output_path: Path) -> CompressionResult:
        try:
            original = self.storage.size_of(input_path)
            await self.run(self.build_arguments(input_path, output_path))
            compressed = self.storage.size_of(output_path)
        except GhostscriptNotFoundError:
            raise
        except CompressionError as exc:
            raise CompressionError(f"Compression failed: {exc}", stderr=exc.stderr) from exc
        except StorageError as exc:
            raise CompressionError(f"Compression failed: {exc}") from exc

        saved = original.bytes - compressed.bytes
        return CompressionResult(
            original_size=original.formatted,
            compressed_size=compressed.formatted,
            original_bytes=original.bytes,
            compressed_bytes=compressed.bytes,
            compression_ratio=self.compression_ratio(original.bytes, compressed.bytes),
            saved_bytes=saved,
            saved_formatted=format_bytes(saved),
        )

    @staticmethod
    def compression_ratio(original_bytes: int, compressed_bytes: int) -> float:
        """نسبة التوفير بخانة عشرية واحدة، ولا تقل عن صفر."""
        if original_bytes == 0:
            return 0.0
        ratio = math.floor(((original_bytes - compressed_bytes) / original_bytes) * 1000 + 0.5) / 10
        return max(0.0, ratio)

    async def validate(self) -> bool:
        """التحقق من توفر Ghostscript عبر تشغيله مع --version."""
        try:
            await self.run(["--version"])
        except Exception:  # noqa: BLE001
            return False
        return True
