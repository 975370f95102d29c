from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdf_compressor.api import routers
from pdf_compressor.core.config import Settings, get_settings
from pdf_compressor.core.logging import configure_logging
from pdf_compressor.services.cleanup_service import CleanupScheduler
from pdf_compressor.services.compression_service import CompressionService
from pdf_compressor.storage.local import LocalStorage
from pdf_compressor.utils.file_utils import trim_number

logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    storage: LocalStorage = app.state.storage
    compression_service: CompressionService = app.state.compression_service
    scheduler: CleanupScheduler = app.state.cleanup_scheduler

    storage.initialize()

    if await compression_service.validate():
        logger.info("تم العثور على Ghostscript")
    else:
        logger.warning("لم يتم العثور على Ghostscript. لن يعمل ضغط ملفات PDF.")
        logger.warning("يرجى تثبيته من: https://www.ghostscript.com/download/gsdnld.html")

    scheduler.start()

    logger.info("خدمة ضغط PDF تعمل على http://%s:%s", settings.host, settings.port)
    logger.info("الحد الأقصى للرفع: %s MB", trim_number(settings.max_file_size_mb))

    try:
        yield
    finally:
        await scheduler.stop()
        logger.info("تم إيقاف خدمة ضغط PDF")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    settings.configure_paths()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    # === الخدمات ===
    storage = LocalStorage(settings)
    app.state.settings = settings
    app.state.storage = storage
    app.state.compression_service = CompressionService(storage, settings)
    app.state.cleanup_scheduler = CleanupScheduler(
        storage, settings.cleanup_interval, enabled=settings.cleanup_enabled
    )

    # === CORS ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # === Routers ===
    for router in routers:
        app.include_router(router)

    @app.get("/api/health")
    async def health_check() -> dict:
        logger.debug("Health check invoked")
        return {"status": "ok", "message": "PDF Compressor is running"}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
