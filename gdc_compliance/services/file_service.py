"""
File Service — turns uploaded bytes into UploadedDocument records.

Files are read as UTF-8 text with replacement characters. There is no
PDF or Word parsing; binary formats come through as best-effort text.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from gdc_compliance.config import get_settings
from gdc_compliance.models.schemas import UploadedDocument
from gdc_compliance.utils.hashing import sha256_hash, short_fingerprint

logger = logging.getLogger(__name__)


class UnsupportedFileError(ValueError):
    """File extension is not in settings.allowed_extensions."""


class FileTooLargeError(ValueError):
    """File exceeds settings.max_upload_bytes."""


class FileService:
    """Validates uploads and builds documents from raw bytes or local paths."""

    def __init__(self):
        self.settings = get_settings()
        self.allowed_extensions = {ext.lower() for ext in self.settings.allowed_extensions}

    def validate(self, name: str, size: int) -> None:
        """Raise if the file name or size is not acceptable."""
        suffix = Path(name).suffix.lower()
        if suffix not in self.allowed_extensions:
            raise UnsupportedFileError(
                f"Unsupported file type '{suffix or name}'. "
                f"Allowed: {', '.join(sorted(self.allowed_extensions))}"
            )
        if size > self.settings.max_upload_bytes:
            raise FileTooLargeError(
                f"File '{name}' is {size} bytes; limit is {self.settings.max_upload_bytes} bytes"
            )

    def build_document(self, name: str, data: bytes, content_type: str = "") -> UploadedDocument:
        """Validate and decode one uploaded file."""
        self.validate(name, len(data))
        if not content_type:
            content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"

        document = UploadedDocument(
            name=name,
            content=data.decode("utf-8", errors="replace"),
            size=len(data),
            content_type=content_type,
            sha256=sha256_hash(data),
        )
        logger.info(
            f"Loaded document '{name}' ({document.size} bytes, {content_type}, "
            f"sha256={short_fingerprint(data)})"
        )
        return document

    def load_path(self, path: str | Path) -> UploadedDocument:
        """Read a local file (used by the CLI)."""
        file_path = Path(path)
        return self.build_document(file_path.name, file_path.read_bytes())
