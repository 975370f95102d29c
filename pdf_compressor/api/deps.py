from fastapi import Request

from pdf_compressor.core.config import Settings
from pdf_compressor.services.compression_service import CompressionService
from pdf_compressor.storage.local import LocalStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_compression_service(request: Request) -> CompressionService:
    return request.app.state.compression_service
