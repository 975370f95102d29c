"""HTTP tests for the compression service."""

import sys

import pytest
from fastapi.testclient import TestClient

from pdf_compressor.api.files import DeletingFileResponse
from pdf_compressor.main import create_app
from pdf_compressor.services.compression_service import GhostscriptCandidate
from pdf_compressor.services.exceptions import StorageError

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake executables are shell scripts")


def _pdf(size, name="report.pdf", media_type="application/pdf"):
    return {"pdf": (name, b"%PDF" + b"0" * (size - 4), media_type)}


@pytest.fixture
def app(settings, fake_ghostscript):
    settings.ghostscript_path = str(fake_ghostscript)
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def storage(app):
    return app.state.storage


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@posix_only
class TestCompressEndpoint:
    def test_compresses_upload(self, client, storage):
        response = client.post("/api/compress", files=_pdf(5_000_000))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["originalName"] == "report.pdf"
        assert body["filename"].startswith("compreport-")
        assert body["originalBytes"] == 5_000_000
        assert body["compressedBytes"] == 1_800_000
        assert body["compressionRatio"] == 64.0
        assert body["savedBytes"] == 3_200_000
        assert body["originalSize"] == "4.77 MB"
        assert body["compressedSize"] == "1.72 MB"
        assert body["savedFormatted"] == "3.05 MB"

        assert list(storage.upload_dir.iterdir()) == []
        assert (storage.compressed_dir / body["filename"]).stat().st_size == 1_800_000

    def test_rejects_non_pdf(self, client, storage):
        response = client.post("/api/compress", files=_pdf(100, name="notes.txt", media_type="text/plain"))

        assert response.status_code == 400
        assert "error" in response.json()
        assert list(storage.upload_dir.iterdir()) == []
        assert list(storage.compressed_dir.iterdir()) == []

    def test_rejects_oversize(self, settings, fake_ghostscript):
        settings.ghostscript_path = str(fake_ghostscript)
        settings.max_file_size = 1024 * 1024
        with TestClient(create_app(settings)) as client:
            response = client.post("/api/compress", files=_pdf(2 * 1024 * 1024))

        assert response.status_code == 400
        assert "1 MB" in response.json()["error"]

    def test_rejects_missing_file(self, client):
        response = client.post("/api/compress")

        assert response.status_code == 400

    def test_upload_write_failure_is_structured_error(self, client, storage, monkeypatch):
        def _disk_full(upload):
            raise StorageError("Error saving upload: [Errno 28] No space left on device")

        monkeypatch.setattr(storage, "save_upload", _disk_full)

        response = client.post("/api/compress", files=_pdf(1000))

        assert response.status_code == 500
        body = response.json()
        assert "error" in body
        assert "No space left" in body["details"]

    def test_missing_ghostscript_returns_install_guidance(self, app, client, storage, tmp_path):
        app.state.compression_service.candidates = lambda: [GhostscriptCandidate(str(tmp_path / "missing"))]

        response = client.post("/api/compress", files=_pdf(1000))

        assert response.status_code == 500
        body = response.json()
        assert "Ghostscript" in body["error"]
        assert body["details"].startswith("Ghostscript not found")
        assert list(storage.upload_dir.iterdir()) == []

    def test_failed_compression_is_generic(self, app, client, storage, make_script):
        broken = make_script("broken-gs", "#!/bin/sh\necho 'Error: /undefined' >&2\nexit 1\n")
        app.state.compression_service.candidates = lambda: [GhostscriptCandidate(str(broken))]

        response = client.post("/api/compress", files=_pdf(1000))

        assert response.status_code == 500
        body = response.json()
        assert "Ghostscript" not in body["error"]
        assert body["details"].startswith("Compression failed")
        assert "/undefined" in body["details"]
        assert list(storage.upload_dir.iterdir()) == []


@posix_only
class TestDownloadEndpoint:
    def test_downloads_and_deletes(self, client, storage):
        filename = client.post("/api/compress", files=_pdf(10_000)).json()["filename"]

        response = client.get(f"/api/download/{filename}")

        assert response.status_code == 200
        assert len(response.content) == 1_800_000
        assert "attachment" in response.headers["content-disposition"]
        assert filename in response.headers["content-disposition"]
        assert not (storage.compressed_dir / filename).exists()

    def test_keeps_file_when_deletion_disabled(self, settings, fake_ghostscript):
        settings.ghostscript_path = str(fake_ghostscript)
        settings.delete_after_download = False
        app = create_app(settings)
        with TestClient(app) as client:
            filename = client.post("/api/compress", files=_pdf(10_000)).json()["filename"]
            response = client.get(f"/api/download/{filename}")

        assert response.status_code == 200
        assert (app.state.storage.compressed_dir / filename).exists()

    def test_unknown_file_is_404(self, client):
        response = client.get("/api/download/compmissing-1.pdf")

        assert response.status_code == 404
        assert "error" in response.json()


async def _receive():
    return {"type": "http.request", "body": b"", "more_body": False}


async def _broken_send(message):
    if message["type"] == "http.response.body":
        raise OSError("connection reset by peer")


@pytest.mark.anyio
class TestInterruptedDownload:
    @pytest.mark.parametrize(("delete_on_failure", "kept"), [(True, False), (False, True)])
    async def test_failed_transfer_follows_setting(self, storage, delete_on_failure, kept):
        storage.initialize()
        path = storage.output_path("compreport-1.pdf")
        path.write_bytes(b"%PDF" * 1000)
        response = DeletingFileResponse(
            path,
            storage=storage,
            delete_on_success=True,
            delete_on_failure=delete_on_failure,
            filename=path.name,
            media_type="application/pdf",
        )
        scope = {
            "type": "http",
            "method": "GET",
            "path": f"/api/download/{path.name}",
            "query_string": b"",
            "headers": [],
        }

        with pytest.raises(Exception):
            await response(scope, _receive, _broken_send)

        assert path.exists() is kept
