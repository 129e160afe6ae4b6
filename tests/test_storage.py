# File: tests/test_storage.py
from datetime import datetime, timezone

import pytest

from shotcrawl.exceptions import PersistError
from shotcrawl.storage import Persister, filename_for, persist

NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "url,file_type,expected",
    [
        ("https://example.com/", "png", "example.com_2024-05-01T12-30-00-000Z.png"),
        ("https://example.com", "pdf", "example.com_2024-05-01T12-30-00-000Z.pdf"),
        ("https://example.com/docs/intro", "jpeg", "example.com-docs-intro_2024-05-01T12-30-00-000Z.jpeg"),
        ("https://example.com/a%20b/?q=1", "webp", "example.com-a_b_2024-05-01T12-30-00-000Z.webp"),
    ],
)
def test_filename_for(url, file_type, expected):
    assert filename_for(url, file_type, NOW) == expected


def test_persist_writes_file(tmp_path):
    out = tmp_path / "shots"
    path = persist(b"\x89PNG data", "https://example.com/page", "png", out, NOW)
    assert path.parent == out
    assert path.read_bytes() == b"\x89PNG data"
    assert not list(out.glob(".partial-*"))


def test_persist_never_overwrites(tmp_path):
    first = persist(b"one", "https://example.com/", "png", tmp_path, NOW)
    second = persist(b"two", "https://example.com/", "png", tmp_path, NOW)
    assert first != second
    assert second.name == "example.com_2024-05-01T12-30-00-000Z-1.png"
    assert first.read_bytes() == b"one"
    assert second.read_bytes() == b"two"


def test_persist_error_when_directory_is_a_file(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    with pytest.raises(PersistError) as exc_info:
        persist(b"data", "https://example.com/", "png", blocker, NOW)
    assert exc_info.value.url == "https://example.com/"


def test_persister_binds_type_and_directory(tmp_path):
    save = Persister("pdf", tmp_path / "docs")
    path = save(b"%PDF-1.4", "https://example.com/report")
    assert path.suffix == ".pdf"
    assert path.parent == tmp_path / "docs"
    assert path.name.startswith("example.com-report_")
