"""
Menu API Backend: Image Storage Service
========================================

What:  Validates, stores, deletes and addresses product images.
How:   Checks extension, size and sniffed MIME type, writes the bytes under
       a namespace directory with a UUID filename, and derives public URLs
       from the stored relative path.
Who:   Called by the validation layer (validate_image) and ProductService
       (store / delete). The product services call url_for to fill imagen_url.

Upload checks:
    1. Extension check:  rejects anything but .jpeg/.jpg/.png/.gif up front
    2. Size check:       MAX_IMAGE_SIZE (2 MiB by default)
    3. MIME type check:  python-magic inspects the file header bytes
    4. UUID filename:    no user input ever reaches the file system path

Storage layout:
    storage/
    └── productos/
        ├── 0b8f5c0e9d2a4a6f8e3c1b7d9a2f4e6c.jpg
        └── 5d1e...c3.png

    The relative path ("productos/<uuid>.jpg") is what the database stores;
    GET /storage/{path} serves it and url_for() builds the public URL.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

from menu_api.config import settings
from menu_api.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif"}

IMAGE_FIELD = "imagen"


@dataclass
class UploadedImage:
    """An image part read from a multipart request."""

    filename: str
    content: bytes
    content_type: Optional[str] = None


class FileService:
    """
    Manages the product image lifecycle on the local storage volume.

    Lifecycle of an uploaded image:
        1. Route reads the multipart part → UploadedImage
        2. validate_image(): extension, size and MIME checks
        3. store(): bytes written to <root>/<namespace>/<uuid><ext>
        4. Relative path saved in productos.imagen
        5. delete(): removed when replaced or when the product is deleted
    """

    def __init__(self, storage_root: Optional[str] = None, public_url: Optional[str] = None):
        """
        Args:
            storage_root: Override the storage directory (used in tests).
            public_url:   Override the base URL used by url_for().
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.public_url = (public_url or settings.public_url).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).

        Raises ValidationError if the extension is not an allowed image type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="La imagen debe ser JPEG, PNG, JPG o GIF",
                field=IMAGE_FIELD,
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content: bytes) -> None:
        """Rejects empty files and files above settings.max_image_size."""
        if not content:
            raise ValidationError(
                message="El archivo debe ser una imagen válida",
                field=IMAGE_FIELD,
                context={"actual_size": 0},
            )
        if len(content) > settings.max_image_size:
            max_mb = settings.max_image_size / (1024 * 1024)
            raise ValidationError(
                message=f"La imagen no debe pesar más de {max_mb:.0f}MB",
                field=IMAGE_FIELD,
                context={"max_size": settings.max_image_size, "actual_size": len(content)},
            )

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Detects the real MIME type from the file header bytes.

        python-magic matches magic numbers (JPEG starts with FF D8 FF, PNG
        with 89 50 4E 47, GIF with "GIF8"), so a renamed text file is
        rejected even with an image extension.

        Returns:
            Detected MIME type string (e.g., "image/jpeg")

        Raises:
            ValidationError if the MIME type is not an allowed image type
        """
        try:
            import magic
            mime_type = magic.from_buffer(content, mime=True)
        except ImportError:
            # python-magic present without the libmagic shared library
            logger.warning(
                "python-magic not available, falling back to extension-based type detection. "
                "Install libmagic for content sniffing."
            )
            ext = Path(filename).suffix.lower()
            mime_map = {
                ".png": "image/png",
                ".jpg": "image/jpeg",
                ".jpeg": "image/jpeg",
                ".gif": "image/gif",
            }
            mime_type = mime_map.get(ext, "application/octet-stream")
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="No se pudo verificar el tipo de archivo",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="El archivo debe ser una imagen válida",
                field=IMAGE_FIELD,
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_image(self, upload: UploadedImage) -> str:
        """
        Full image check, cheapest first: extension, size, MIME sniffing.

        Returns the extension to store the file with.
        """
        ext = self.validate_extension(upload.filename)
        self.validate_size(upload.content)
        self.validate_mime_type(upload.content, upload.filename)
        return ext

    # ── Storage ───────────────────────────────────────────────────────────

    def _resolve(self, relative_path: str) -> Path:
        """Maps a stored relative path to an absolute path inside the root."""
        absolute = (self.storage_root / relative_path).resolve()
        if not absolute.is_relative_to(self.storage_root):
            raise ValueError(f"Path escapes storage root: {relative_path}")
        return absolute

    async def store(self, content: bytes, namespace: str, extension: str = "") -> str:
        """
        Write image bytes under `namespace` with a UUID filename.

        Returns:
            Relative path from the storage root, e.g. "productos/<uuid>.jpg"

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        relative_path = f"{namespace}/{uuid.uuid4().hex}{extension}"
        absolute_path = self.storage_root / relative_path

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return relative_path

    async def delete(self, relative_path: str) -> bool:
        """
        Remove a stored file. Best-effort and idempotent.

        Returns:
            True if the file is gone afterwards (including when it never
            existed), False if it could not be removed. Never raises.
        """
        try:
            path = self._resolve(relative_path)
            if path.exists():
                os.remove(path)
                logger.info("Deleted file: %s", relative_path)
            else:
                logger.debug("Delete: file already gone: %s", relative_path)
            return True
        except Exception as e:
            logger.warning("Failed to delete file %s: %s", relative_path, str(e))
            return False

    def exists(self, relative_path: str) -> bool:
        try:
            return self._resolve(relative_path).is_file()
        except ValueError:
            return False

    def path_for(self, relative_path: str) -> Path:
        """Absolute path of a stored file; ValueError if it escapes the root."""
        return self._resolve(relative_path)

    def url_for(self, relative_path: str) -> str:
        """Public URL for a stored path. Pure string derivation, no I/O."""
        return f"{self.public_url}/storage/{relative_path.lstrip('/')}"


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
