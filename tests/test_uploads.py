from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from core import media
from uploads import dependencies as upload_dependencies
from uploads import service
from uploads.service import UploadSettings


class FakeMediaHost:
    def __init__(self, fail_slots: set[str] | None = None) -> None:
        self.fail_slots = fail_slots or set()
        self.calls: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def upload_file(self, path, *, config, resource_type="auto", filename=None, transport=None):
        path = Path(path)
        self.calls.append(
            {
                "path": path,
                "existed": path.exists(),
                "content": path.read_bytes(),
                "resource_type": resource_type,
                "filename": filename,
            }
        )
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
        finally:
            self.in_flight -= 1
        slot = filename.split("-")[0]
        if slot in self.fail_slots:
            raise media.MediaUploadError(f"Media upload failed: 401 invalid signature for {slot}")
        return f"https://res.example.com/{config.cloud_name}/image/upload/{config.folder}/{filename}"


@pytest.fixture
def host(monkeypatch: pytest.MonkeyPatch) -> FakeMediaHost:
    fake = FakeMediaHost()
    monkeypatch.setattr(media, "upload_file", fake.upload_file)
    return fake


def _scratch(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


def test_no_files_means_no_remote_call(client, host) -> None:
    resp = client.post("/upload", data={"note": "nothing attached"})

    assert resp.status_code == 200
    assert resp.json() == {"img1": None, "img2": None, "img3": None}
    assert host.calls == []


def test_only_img2_is_uploaded(client, host, tmp_path) -> None:
    resp = client.post("/upload", files={"img2": ("img2-front.png", b"\x89PNG-data", "image/png")})

    assert resp.status_code == 200
    body = resp.json()
    assert body["img1"] is None
    assert body["img3"] is None
    assert body["img2"].startswith("https://")
    assert body["img2"].endswith("img2-front.png")

    [call] = host.calls
    assert call["existed"]
    assert call["content"] == b"\x89PNG-data"
    assert call["resource_type"] == "auto"
    assert list(_scratch(tmp_path).iterdir()) == []


def test_all_slots_upload_concurrently(client, host) -> None:
    files = {
        "img1": ("img1-a.png", b"a", "image/png"),
        "img2": ("img2-b.png", b"b", "image/png"),
        "img3": ("img3-c.png", b"c", "image/png"),
    }

    resp = client.post("/upload", files=files)

    assert resp.status_code == 200
    assert all(url.startswith("https://") for url in resp.json().values())
    assert len(host.calls) == 3
    assert host.max_in_flight == 3
    # Staged under distinct names.
    assert len({call["path"] for call in host.calls}) == 3


def test_failed_slot_keeps_resolved_urls(client, host, tmp_path) -> None:
    host.fail_slots = {"img2"}
    files = {
        "img1": ("img1-a.png", b"a", "image/png"),
        "img2": ("img2-b.png", b"b", "image/png"),
    }

    resp = client.post("/upload", files=files)

    assert resp.status_code == 500
    body = resp.json()
    assert body["kind"] == "media_upload_error"
    assert "img2" in body["error"]
    assert body["img1"].startswith("https://")
    assert body["img2"] is None
    assert body["img3"] is None
    assert "invalid signature" in body["failed"]["img2"]
    assert list(_scratch(tmp_path).iterdir()) == []


def test_oversized_file_is_rejected_and_cleaned_up(client, host, tmp_path, upload_settings) -> None:
    small = UploadSettings(scratch_dir=upload_settings.scratch_dir, max_bytes=4)
    client.app.dependency_overrides[upload_dependencies.get_upload_settings] = lambda: small

    resp = client.post("/upload", files={"img1": ("img1-a.png", b"too large", "image/png")})

    assert resp.status_code == 413
    assert resp.json()["kind"] == "http_error"
    assert host.calls == []
    assert list(_scratch(tmp_path).iterdir()) == []


def test_unsafe_filename_is_sanitized(client, host) -> None:
    resp = client.post("/upload", files={"img1": ("../../etc/img1 x?.png", b"a", "image/png")})

    assert resp.status_code == 200
    [call] = host.calls
    assert call["filename"] == "img1_x_.png"
    assert ".." not in call["path"].name


def test_scratch_writes_run_in_threadpool(client, host, monkeypatch) -> None:
    offloaded: list[str] = []
    real = service.run_in_threadpool

    async def recording(func, *args, **kwargs):
        offloaded.append(getattr(func, "__name__", repr(func)))
        return await real(func, *args, **kwargs)

    monkeypatch.setattr(service, "run_in_threadpool", recording)

    resp = client.post("/upload", files={"img1": ("img1-a.png", b"abc", "image/png")})

    assert resp.status_code == 200
    assert offloaded == ["mkstemp", "write", "close", "unlink"]


def test_upload_settings_from_env(monkeypatch, tmp_path) -> None:
    scratch = tmp_path / "nested" / "scratch"
    monkeypatch.setenv("UPLOAD_SCRATCH_DIR", str(scratch))
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "2048")

    settings = service.upload_settings_from_env()

    assert settings == UploadSettings(scratch_dir=scratch, max_bytes=2048)
    assert scratch.is_dir()


@pytest.mark.parametrize("raw", ["lots", "0", "-5"])
def test_bad_max_upload_bytes_fails_at_startup(monkeypatch, tmp_path, raw: str) -> None:
    monkeypatch.setenv("UPLOAD_SCRATCH_DIR", str(tmp_path))
    monkeypatch.setenv("MAX_UPLOAD_BYTES", raw)

    with pytest.raises(RuntimeError, match="MAX_UPLOAD_BYTES"):
        service.upload_settings_from_env()
