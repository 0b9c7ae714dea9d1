"""File storage clients for uploaded study materials.

The application only ever needs two operations from a store: put bytes and
get back a resolvable URL, and delete whatever lives behind such a URL.
``CloudinaryStorage`` is the production backend; ``LocalFileStorage`` keeps
files on disk and is served by the API itself under ``/files``.

A single client is built at startup (``build_storage``) and handed to
request handlers through the ``get_storage`` dependency.
"""

import io
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import unquote, urlparse
from uuid import uuid4

import aiofiles
import aiofiles.os
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool

from src.config import Settings
from src.storage.models import FileType

logger = logging.getLogger(__name__)

LOCAL_FILES_PREFIX = "/files"

_VERSION_SEGMENT = re.compile(r"v\d+")


class StorageError(Exception):
    """Raised when the backing store rejects an upload or delete."""


def file_type_from_filename(filename: str | None) -> FileType:
    """Derive the file type from the extension of ``filename``.

    The extension is the last dot-separated segment, compared
    case-insensitively.

    Raises:
        HTTPException 400: Missing filename or extension not pdf/docx
    """
    if not filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    try:
        return FileType(extension)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only PDF and DOCX files are allowed.",
        ) from None


def validate_upload_size(content: bytes, max_size: int) -> None:
    """Reject empty and oversized uploads.

    Raises:
        HTTPException 400: Empty file
        HTTPException 413: File larger than ``max_size`` bytes
    """
    if len(content) == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    if len(content) > max_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.",
        )


def _safe_name(filename: str) -> str:
    name = Path(filename).name
    return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "upload"


class FileStorage(ABC):
    """Contract for an external object store."""

    @abstractmethod
    async def upload(self, filename: str, content: bytes, folder: str) -> str:
        """Store ``content`` under ``folder`` and return a resolvable URL."""

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Delete the object that ``url`` (as returned by upload) points to."""


class LocalFileStorage(FileStorage):
    """Stores files on local disk.

    Files land in ``<upload_dir>/<folder>/<uuid>_<filename>`` and are
    addressed as ``<base_url>/files/<folder>/<uuid>_<filename>``.
    """

    def __init__(self, upload_dir: Path, base_url: str):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")

    async def upload(self, filename: str, content: bytes, folder: str) -> str:
        unique_filename = f"{uuid4()}_{_safe_name(filename)}"
        target_dir = self.upload_dir / folder
        target_dir.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(target_dir / unique_filename, "wb") as f:
            await f.write(content)

        return f"{self.base_url}{LOCAL_FILES_PREFIX}/{folder}/{unique_filename}"

    def path_for_url(self, url: str) -> Path:
        """Map a URL produced by ``upload`` back to a path on disk."""
        path = unquote(urlparse(url).path)
        prefix = f"{LOCAL_FILES_PREFIX}/"
        if not path.startswith(prefix):
            raise StorageError(f"Not a local storage URL: {url}")

        root = self.upload_dir.resolve()
        file_path = (root / path[len(prefix):]).resolve()
        if root not in file_path.parents:
            raise StorageError(f"URL escapes the upload directory: {url}")
        return file_path

    async def delete(self, url: str) -> None:
        file_path = self.path_for_url(url)
        if not await aiofiles.os.path.exists(file_path):
            logger.warning("Stored file already missing: %s", file_path)
            return
        await aiofiles.os.remove(file_path)


class CloudinaryStorage(FileStorage):
    """Stores files as raw assets in Cloudinary.

    Credentials are passed on every call instead of through the SDK's
    global ``cloudinary.config``.
    """

    resource_type = "raw"

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    @staticmethod
    def public_id_from_url(url: str) -> str:
        """Extract the Cloudinary public id from a delivery URL.

        ``https://res.cloudinary.com/<cloud>/raw/upload/v123/noteshelp/a.pdf``
        maps to ``noteshelp/a.pdf``. Raw assets keep their extension in the
        public id.
        """
        path = urlparse(url).path
        _, sep, tail = path.partition("/upload/")
        if not sep or not tail:
            raise StorageError(f"Not a Cloudinary delivery URL: {url}")

        segments = tail.split("/")
        if len(segments) > 1 and _VERSION_SEGMENT.fullmatch(segments[0]):
            segments = segments[1:]
        return unquote("/".join(segments))

    async def upload(self, filename: str, content: bytes, folder: str) -> str:
        extension = filename.rsplit(".", 1)[-1].lower()
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(content),
                folder=folder,
                public_id=f"{uuid4().hex}.{extension}",
                resource_type=self.resource_type,
                **self._credentials,
            )
        except cloudinary.exceptions.Error as e:
            raise StorageError(f"Cloudinary upload failed: {e}") from e

        return result["secure_url"]

    async def delete(self, url: str) -> None:
        public_id = self.public_id_from_url(url)
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.destroy,
                public_id,
                resource_type=self.resource_type,
                invalidate=True,
                **self._credentials,
            )
        except cloudinary.exceptions.Error as e:
            raise StorageError(f"Cloudinary delete failed: {e}") from e

        outcome = result.get("result")
        if outcome == "not found":
            logger.warning("Cloudinary asset already missing: %s", public_id)
        elif outcome != "ok":
            raise StorageError(f"Cloudinary delete of {public_id} returned {outcome!r}")


def build_storage(settings: Settings) -> FileStorage:
    """Construct the storage client selected by ``settings.storage_backend``."""
    if settings.storage_backend == "cloudinary":
        missing = [
            name
            for name in ("cloudinary_cloud_name", "cloudinary_api_key", "cloudinary_api_secret")
            if not getattr(settings, name)
        ]
        if missing:
            raise ValueError(f"Cloudinary storage requires: {', '.join(missing)}")
        return CloudinaryStorage(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )

    return LocalFileStorage(settings.upload_dir, settings.public_base_url)


def get_storage(request: Request) -> FileStorage:
    """Dependency returning the storage client built at startup."""
    return request.app.state.storage
