from __future__ import annotations

import asyncio
from typing import Optional

from pdf_compressor.core.logging import configure_logging
from pdf_compressor.storage.local import LocalStorage

logger = configure_logging("cleanup")


class CleanupScheduler:
    """مؤقت دوري يحذف الملفات المنتهية الصلاحية من مجلدات التخزين."""

    def __init__(self, storage: LocalStorage, interval: float, *, enabled: bool = True) -> None:
        self.storage = storage
        self.interval = interval
        self.enabled = enabled
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.enabled or self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("تم تشغيل جدولة تنظيف الملفات (كل %s ثانية)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> int:
        try:
            return await asyncio.to_thread(self.storage.sweep_expired)
        except Exception:  # noqa: BLE001
            logger.exception("خطأ أثناء تنظيف الملفات القديمة")
            return 0

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.run_once()
