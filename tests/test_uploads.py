from io import BytesIO
from types import SimpleNamespace

import pytest

from app.core.errors import BadRequestError, NotFoundError
import app.services.uploads as uploads


@pytest.fixture
def upload_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(
        uploads, "settings", SimpleNamespace(uploads_dir=str(tmp_path), upload_max_bytes=16)
    )
    return tmp_path


def test_store_file_writes_under_generated_name(upload_dir):
    stored = uploads.store_file("Premio.PNG", "image/png", b"png-bytes")

    assert stored["filename"].startswith("file-")
    assert stored["filename"].endswith(".png")
    assert stored["url"] == f"/uploads/{stored['filename']}"
    assert stored["size"] == 9
    assert (upload_dir / stored["filename"]).read_bytes() == b"png-bytes"


def test_store_file_rejects_empty_and_oversized(upload_dir):
    with pytest.raises(BadRequestError, match="No file provided"):
        uploads.store_file("a.png", "image/png", b"")
    with pytest.raises(BadRequestError, match="maximum size"):
        uploads.store_file("a.png", "image/png", b"x" * 17)
    assert list(upload_dir.iterdir()) == []


def test_store_files_validates_before_writing(upload_dir):
    files = [("a.png", "image/png", b"ok"), ("b.png", "image/png", b"x" * 17)]

    with pytest.raises(BadRequestError):
        uploads.store_files(files)
    assert list(upload_dir.iterdir()) == []


def test_store_files_limits_batch_size(upload_dir):
    files = [(f"{n}.png", "image/png", b"x") for n in range(uploads.MAX_FILES_PER_REQUEST + 1)]

    with pytest.raises(BadRequestError, match="At most"):
        uploads.store_files(files)
    with pytest.raises(BadRequestError, match="No files"):
        uploads.store_files([])


def test_list_and_delete(upload_dir):
    (upload_dir / "b.jpg").write_bytes(b"b")
    (upload_dir / "a.jpg").write_bytes(b"a")

    assert [item["filename"] for item in uploads.list_files()] == ["a.jpg", "b.jpg"]

    assert uploads.delete_file("a.jpg")["success"] is True
    assert not (upload_dir / "a.jpg").exists()
    with pytest.raises(NotFoundError):
        uploads.delete_file("a.jpg")


@pytest.mark.parametrize("name", ["../secret", "a/b.png", "..\\x", "..", "."])
def test_resolve_file_rejects_paths(upload_dir, name):
    with pytest.raises(BadRequestError, match="Invalid filename"):
        uploads.resolve_file(name)


def test_read_upload_stops_past_the_limit(upload_dir):
    stream = BytesIO(b"x" * 1000)

    data = uploads.read_upload(stream)

    assert len(data) == 17
    with pytest.raises(BadRequestError, match="maximum size"):
        uploads.store_file("big.png", "image/png", data)
    assert uploads.read_upload(BytesIO(b"small")) == b"small"
