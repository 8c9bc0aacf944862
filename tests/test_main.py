import pytest
from fastapi.testclient import TestClient

from http_toolkit import config
from http_toolkit.main import app


@pytest.fixture
def client(monkeypatch, upload_dir):
    monkeypatch.setattr(config, "UPLOAD_DIR", upload_dir)
    monkeypatch.setattr(config, "UPLOAD_ALLOWED_TYPES", frozenset({"image/png", "image/gif", "image/jpeg"}))
    monkeypatch.setattr(config, "UPLOAD_MAX_SIZE", 1024 * 1024)
    monkeypatch.setattr(config, "UPLOAD_RENAME_FILES", True)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_then_download(client, upload_dir, png_bytes):
    response = client.post("/file", files={"file": ("img.png", png_bytes, "image/png")})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is False
    stored = body["data"]
    assert stored["original_file_name"] == "img.png"
    assert stored["file_size"] == len(png_bytes)
    assert (upload_dir / stored["new_file_name"]).is_file()

    download = client.get("/file", params={"name": stored["new_file_name"], "display_name": "img.png"})

    assert download.status_code == 200
    assert download.content == png_bytes
    assert download.headers["content-disposition"] == 'attachment; filename="img.png"'


def test_upload_many(client, png_bytes):
    response = client.post(
        "/files",
        files=[
            ("file", ("a.png", png_bytes, "image/png")),
            ("file", ("b.png", png_bytes, "image/png")),
        ],
    )

    assert response.status_code == 200
    assert [item["original_file_name"] for item in response.json()["data"]] == ["a.png", "b.png"]


def test_rejected_type_is_415_envelope(client):
    response = client.post("/files", files={"file": ("notes.png", b"plain text", "image/png")})

    assert response.status_code == 415
    assert response.json()["error"] is True


def test_single_upload_with_two_files_is_400(client, png_bytes):
    response = client.post(
        "/file",
        files=[
            ("file", ("a.png", png_bytes, "image/png")),
            ("file", ("b.png", png_bytes, "image/png")),
        ],
    )

    assert response.status_code == 400
    assert "exactly one" in response.json()["message"]


def test_oversized_upload_is_413(client, monkeypatch, png_bytes):
    monkeypatch.setattr(config, "UPLOAD_MAX_SIZE", 128)

    response = client.post("/files", files={"file": ("img.png", png_bytes, "image/png")})

    assert response.status_code == 413


def test_non_multipart_upload_is_400(client):
    response = client.post("/files", json={"hello": "world"})

    assert response.status_code == 400
    assert response.json()["error"] is True


def test_download_missing_is_404(client):
    response = client.get("/file", params={"name": "../../etc/passwd"})

    assert response.status_code == 404


def test_slug(client):
    response = client.get("/slug", params={"text": "Hello World"})

    assert response.json()["data"] == {"slug": "hello-world"}


def test_slug_error(client):
    response = client.get("/slug", params={"text": "!!!"})

    assert response.status_code == 400
    assert response.json() == {"error": True, "message": "after removing characters, slug is zero length"}


def test_module_entry_point_runs_uvicorn(monkeypatch):
    from http_toolkit import __main__ as entry_point

    calls = []
    monkeypatch.setattr(entry_point.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setattr(config, "HOST", "0.0.0.0")
    monkeypatch.setattr(config, "PORT", 9000)

    entry_point.main()

    assert calls == [((app,), {"host": "0.0.0.0", "port": 9000, "log_level": config.LOG_LEVEL.lower()})]
