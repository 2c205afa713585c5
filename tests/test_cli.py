"""Black-box tests for CLI entry point."""

import re
from pathlib import Path

import pytest
from pytest_httpx import HTTPXMock
from typer.testing import CliRunner

from event_gallery.cli import app

runner = CliRunner()

LIST_URL = "https://test.supabase.co/storage/v1/object/list/event-photos"
UPLOAD_URL = re.compile(r"https://test\.supabase\.co/storage/v1/object/event-photos/.+")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in [
        "SUPABASE_URL",
        "SUPABASE_KEY",
        "EVENT_GALLERY_BUCKET",
        "EVENT_GALLERY_KEY",
        "EVENT_GALLERY_SECRET",
    ]:
        monkeypatch.delenv(name, raising=False)


def storage_args(storage_url: str, api_key: str) -> list[str]:
    return ["--storage-url", storage_url, "--api-key", api_key]


def listing(*names: str) -> list[dict]:
    return [{"name": name, "id": name, "created_at": None} for name in names]


class TestUploadCommand:
    """Test the upload command."""

    def test_cli_help(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Share event photos" in result.stdout

    def test_dry_run_success(self, temp_photos_dir: Path) -> None:
        """Test dry run counts only the image files."""
        result = runner.invoke(
            app, ["upload", str(temp_photos_dir), "--dry-run", "--display-delay", "0"]
        )

        assert result.exit_code == 0
        assert "Successful: 2" in result.stdout

    def test_missing_storage_options(self, temp_photos_dir: Path) -> None:
        result = runner.invoke(app, ["upload", str(temp_photos_dir)])

        assert result.exit_code == 1
        assert "storage url and api key are required" in result.stdout.lower()

    def test_upload_refreshes_gallery(
        self, temp_photos_dir: Path, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        """Test that a finished batch is followed by a gallery listing."""
        for _ in range(2):
            httpx_mock.add_response(method="POST", url=UPLOAD_URL, json={"Key": "k"})
        httpx_mock.add_response(
            method="POST", url=LIST_URL, json=listing("2-new.png", "1-new.jpg")
        )

        result = runner.invoke(
            app,
            ["upload", str(temp_photos_dir), "--display-delay", "0"]
            + storage_args(storage_url, api_key),
        )

        assert result.exit_code == 0
        assert "Successfully uploaded 2 photo(s)!" in result.stdout
        assert "Successful: 2" in result.stdout
        assert "2-new.png" in result.stdout
        requests = httpx_mock.get_requests()
        assert [str(r.url) == LIST_URL for r in requests] == [False, False, True]

    def test_upload_failure(
        self, temp_photos_dir: Path, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        """Test partial failure is reported with exit code 1."""
        httpx_mock.add_response(
            method="POST",
            url=UPLOAD_URL,
            json={"statusCode": "409", "error": "Duplicate", "message": "exists"},
            status_code=400,
        )
        httpx_mock.add_response(method="POST", url=UPLOAD_URL, json={"Key": "k"})
        httpx_mock.add_response(method="POST", url=LIST_URL, json=listing("1-new.png"))

        result = runner.invoke(
            app,
            ["upload", str(temp_photos_dir), "--display-delay", "0"]
            + storage_args(storage_url, api_key),
        )

        assert result.exit_code == 1
        assert "Failed: 1" in result.stdout
        assert "photo1.jpg" in result.stdout

    def test_only_non_images(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("not a photo")

        result = runner.invoke(app, ["upload", str(notes), "--dry-run"])

        assert result.exit_code == 0
        assert "Successful" not in result.stdout

    def test_nonexistent_path(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["upload", str(tmp_path / "missing.jpg"), "--dry-run"])

        # Typer validates path existence before our code runs
        assert result.exit_code == 2

    def test_access_denied(self, temp_photos_dir: Path) -> None:
        result = runner.invoke(
            app,
            [
                "upload",
                str(temp_photos_dir),
                "--dry-run",
                "--access-secret",
                "s3cret",
                "--key",
                "wrong",
            ],
        )

        assert result.exit_code == 1
        assert "Access required" in result.stdout

    def test_access_granted_from_env(self, temp_photos_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("EVENT_GALLERY_SECRET", "s3cret")
        monkeypatch.setenv("EVENT_GALLERY_KEY", "s3cret")

        result = runner.invoke(
            app, ["upload", str(temp_photos_dir), "--dry-run", "--display-delay", "0"]
        )

        assert result.exit_code == 0


class TestGalleryCommand:
    """Test the gallery command."""

    def test_gallery_listing(
        self, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST", url=LIST_URL, json=listing("c.jpg", "b.jpg", "a.jpg")
        )

        result = runner.invoke(app, ["gallery"] + storage_args(storage_url, api_key))

        assert result.exit_code == 0
        assert "c.jpg" in result.stdout
        assert "tall" in result.stdout

    def test_gallery_empty(
        self, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(method="POST", url=LIST_URL, json=[])

        result = runner.invoke(app, ["gallery"] + storage_args(storage_url, api_key))

        assert result.exit_code == 0
        assert "No photos yet!" in result.stdout

    def test_gallery_listing_failure(
        self, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        """Test that a failed listing shows the empty gallery."""
        httpx_mock.add_response(method="POST", url=LIST_URL, text="down", status_code=503)

        result = runner.invoke(app, ["gallery"] + storage_args(storage_url, api_key))

        assert result.exit_code == 0
        assert "No photos yet!" in result.stdout

    def test_gallery_open(
        self, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            method="POST", url=LIST_URL, json=listing("c.jpg", "b.jpg", "a.jpg")
        )

        result = runner.invoke(
            app, ["gallery", "--open", "1"] + storage_args(storage_url, api_key)
        )

        assert result.exit_code == 0
        assert "2 of 3" in result.stdout
        assert "< previous" in result.stdout
        assert "next >" in result.stdout

    def test_gallery_open_out_of_range(
        self, storage_url: str, api_key: str, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(method="POST", url=LIST_URL, json=listing("a.jpg"))

        result = runner.invoke(
            app, ["gallery", "--open", "5"] + storage_args(storage_url, api_key)
        )

        assert result.exit_code == 1
        assert "No photo at that position" in result.stdout

    def test_gallery_access_denied(self, storage_url: str, api_key: str) -> None:
        result = runner.invoke(
            app,
            ["gallery", "--access-secret", "s3cret"] + storage_args(storage_url, api_key),
        )

        assert result.exit_code == 1
        assert "Access required" in result.stdout
