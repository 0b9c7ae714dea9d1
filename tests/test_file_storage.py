"""Tests for file type validation and the storage clients."""

from unittest.mock import patch

import cloudinary.exceptions
import pytest
from fastapi import HTTPException

from src.config import Settings
from src.storage.file_storage import (
    CloudinaryStorage,
    LocalFileStorage,
    StorageError,
    build_storage,
    file_type_from_filename,
    validate_upload_size,
)
from src.storage.models import FileType

CLOUD_URL = "https://res.cloudinary.com/demo/raw/upload/v1712345678/noteshelp/abc123.pdf"


class TestFileType:
    """Tests for file_type_from_filename."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("notes.pdf", FileType.PDF),
            ("NOTES.PDF", FileType.PDF),
            ("past.paper.2023.docx", FileType.DOCX),
            ("Report.Docx", FileType.DOCX),
        ],
    )
    def test_allowed_extensions(self, filename, expected):
        assert file_type_from_filename(filename) == expected

    @pytest.mark.parametrize("filename", ["paper.exe", "notes.pdf.exe", "notes.doc", "README", "pdf"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(HTTPException) as exc_info:
            file_type_from_filename(filename)
        assert exc_info.value.status_code == 400

    def test_missing_filename(self):
        with pytest.raises(HTTPException) as exc_info:
            file_type_from_filename(None)
        assert exc_info.value.detail == "Filename is required"


class TestUploadSize:
    def test_empty_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload_size(b"", 100)
        assert exc_info.value.status_code == 400

    def test_too_large_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload_size(b"x" * 101, 100)
        assert exc_info.value.status_code == 413

    def test_within_limit(self):
        validate_upload_size(b"x" * 100, 100)


class TestLocalFileStorage:
    """Tests for LocalFileStorage."""

    @pytest.fixture
    def local(self, tmp_path):
        return LocalFileStorage(tmp_path / "uploads", "http://files.test/")

    @pytest.mark.asyncio
    async def test_upload_writes_file_and_returns_url(self, local):
        url = await local.upload("My Notes.pdf", b"content", "noteshelp")

        assert url.startswith("http://files.test/files/noteshelp/")
        assert url.endswith("_My_Notes.pdf")
        assert local.path_for_url(url).read_bytes() == b"content"

    @pytest.mark.asyncio
    async def test_uploads_get_distinct_names(self, local):
        first = await local.upload("a.pdf", b"1", "noteshelp")
        second = await local.upload("a.pdf", b"2", "noteshelp")

        assert first != second

    @pytest.mark.asyncio
    async def test_delete_removes_file(self, local):
        url = await local.upload("a.pdf", b"1", "noteshelp")
        path = local.path_for_url(url)

        await local.delete(url)

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_noop(self, local):
        await local.delete("http://files.test/files/noteshelp/gone.pdf")

    def test_url_outside_upload_dir_rejected(self, local):
        with pytest.raises(StorageError):
            local.path_for_url("http://files.test/files/../../etc/passwd")

    def test_foreign_url_rejected(self, local):
        with pytest.raises(StorageError):
            local.path_for_url(CLOUD_URL)


class TestCloudinaryStorage:
    """Tests for CloudinaryStorage with the SDK mocked out."""

    @pytest.fixture
    def cloud(self):
        return CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret")

    @pytest.mark.parametrize(
        "url,expected",
        [
            (CLOUD_URL, "noteshelp/abc123.pdf"),
            ("https://res.cloudinary.com/demo/raw/upload/noteshelp/abc123.docx", "noteshelp/abc123.docx"),
            ("https://res.cloudinary.com/demo/raw/upload/v1/abc.pdf", "abc.pdf"),
            ("https://res.cloudinary.com/demo/raw/upload/v1/my%20notes.pdf", "my notes.pdf"),
        ],
    )
    def test_public_id_from_url(self, url, expected):
        assert CloudinaryStorage.public_id_from_url(url) == expected

    def test_public_id_from_non_cloudinary_url(self):
        with pytest.raises(StorageError):
            CloudinaryStorage.public_id_from_url("https://example.com/notes.pdf")

    @pytest.mark.asyncio
    async def test_upload_passes_folder_and_credentials(self, cloud):
        with patch(
            "src.storage.file_storage.cloudinary.uploader.upload",
            return_value={"secure_url": CLOUD_URL},
        ) as mock_upload:
            url = await cloud.upload("Notes.PDF", b"%PDF", "noteshelp")

        assert url == CLOUD_URL
        kwargs = mock_upload.call_args.kwargs
        assert kwargs["folder"] == "noteshelp"
        assert kwargs["resource_type"] == "raw"
        assert kwargs["cloud_name"] == "demo"
        assert kwargs["api_key"] == "key"
        assert kwargs["public_id"].endswith(".pdf")

    @pytest.mark.asyncio
    async def test_upload_error_becomes_storage_error(self, cloud):
        with patch(
            "src.storage.file_storage.cloudinary.uploader.upload",
            side_effect=cloudinary.exceptions.Error("quota exceeded"),
        ):
            with pytest.raises(StorageError, match="quota exceeded"):
                await cloud.upload("a.pdf", b"%PDF", "noteshelp")

    @pytest.mark.asyncio
    async def test_delete_destroys_public_id(self, cloud):
        with patch(
            "src.storage.file_storage.cloudinary.uploader.destroy",
            return_value={"result": "ok"},
        ) as mock_destroy:
            await cloud.delete(CLOUD_URL)

        assert mock_destroy.call_args.args == ("noteshelp/abc123.pdf",)
        assert mock_destroy.call_args.kwargs["resource_type"] == "raw"

    @pytest.mark.asyncio
    async def test_delete_not_found_is_tolerated(self, cloud):
        with patch(
            "src.storage.file_storage.cloudinary.uploader.destroy",
            return_value={"result": "not found"},
        ):
            await cloud.delete(CLOUD_URL)

    @pytest.mark.asyncio
    async def test_delete_unexpected_result_raises(self, cloud):
        with patch(
            "src.storage.file_storage.cloudinary.uploader.destroy",
            return_value={"result": "error"},
        ):
            with pytest.raises(StorageError):
                await cloud.delete(CLOUD_URL)


class TestBuildStorage:
    def test_local_by_default(self, tmp_path):
        storage = build_storage(Settings(upload_dir=tmp_path))

        assert isinstance(storage, LocalFileStorage)

    def test_cloudinary_requires_credentials(self):
        with pytest.raises(ValueError, match="cloudinary_api_secret"):
            build_storage(
                Settings(
                    storage_backend="cloudinary",
                    cloudinary_cloud_name="demo",
                    cloudinary_api_key="key",
                )
            )

    def test_cloudinary_backend(self):
        storage = build_storage(
            Settings(
                storage_backend="cloudinary",
                cloudinary_cloud_name="demo",
                cloudinary_api_key="key",
                cloudinary_api_secret="secret",
            )
        )

        assert isinstance(storage, CloudinaryStorage)
