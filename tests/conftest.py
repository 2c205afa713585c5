"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from event_gallery.models import StoredObject

STORAGE_URL = "https://test.supabase.co"
BUCKET = "event-photos"


class FakeStorage:
    """In-memory stand-in for the storage client."""

    def __init__(self, names: list[str] | None = None) -> None:
        self.names = list(names or [])
        self.list_calls = 0

    async def list_objects(self, prefix: str = "", limit: int = 1000) -> list[StoredObject]:
        self.list_calls += 1
        return [StoredObject(name=name) for name in self.names][:limit]

    def public_url(self, name: str) -> str:
        return f"{STORAGE_URL}/storage/v1/object/public/{BUCKET}/{name}"


@pytest.fixture
def temp_photos_dir(tmp_path: Path) -> Path:
    """Create a temporary directory with a selection of files.

    Structure:
        temp_dir/
            photo1.jpg
            photo2.png
            notes.txt
            nested/
                photo3.jpg
    """
    (tmp_path / "photo1.jpg").write_bytes(b"fake jpg content")
    (tmp_path / "photo2.png").write_bytes(b"fake png content")
    (tmp_path / "notes.txt").write_text("not a photo")

    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "photo3.jpg").write_bytes(b"fake jpg content")

    return tmp_path


@pytest.fixture
def storage_url() -> str:
    return STORAGE_URL


@pytest.fixture
def api_key() -> str:
    """Return a fake API key for testing."""
    return "test_api_key_123"


@pytest.fixture
def make_storage():
    """Return a factory for fake storage holding the given object names."""
    return FakeStorage
