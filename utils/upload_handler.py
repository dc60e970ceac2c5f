"""
Program: «Postboard» – image posts with captions.
Module: utils/upload_handler.py – accepting uploaded images.

Purpose:
- Validation of the caption and image fields of the multipart form.
- Extension check of the client-supplied filename (no content sniffing).
- Saving the file to the uploads folder under a timestamp-based name.
"""

import logging
import os
import time

from config import Config
from utils.errors import InvalidInput, StorageError, UnsupportedMediaType

logger = logging.getLogger(__name__)


class UploadHandler:
    """Writes accepted images to the upload folder."""

    def __init__(self, upload_folder: str, allowed_extensions=None, url_prefix: str = "/uploads/"):
        self.upload_folder = upload_folder
        self.allowed_extensions = allowed_extensions or Config.ALLOWED_EXTENSIONS
        self.url_prefix = url_prefix

    @staticmethod
    def read_caption(form) -> str:
        caption = (form.get("caption") or "").strip()
        if not caption:
            raise InvalidInput("Caption is required")
        return caption

    def accept(self, files) -> str:
        """Validates and stores the `image` file, returning the stored name."""
        file = files.get("image")
        if file is None or not file.filename:
            raise InvalidInput("Image is required")

        if not Config.allowed_file(file.filename, self.allowed_extensions):
            raise UnsupportedMediaType("Only JPG, PNG, WEBP images are allowed")

        # Nanosecond timestamps keep names unique without a lookup.
        extension = Config.file_extension(file.filename)
        filename = f"{time.time_ns()}{extension}"
        filepath = os.path.join(self.upload_folder, filename)

        try:
            file.save(filepath)
        except OSError as exc:
            self._remove(filepath)
            raise StorageError(f"Failed to save image: {exc}") from exc

        logger.info("Stored upload %s (%s)", filename, file.filename)
        return filename

    def public_url(self, filename: str) -> str:
        return self.url_prefix + filename

    def discard(self, filename: str) -> None:
        """Removes a stored file whose post could not be recorded."""
        self._remove(os.path.join(self.upload_folder, filename))

    @staticmethod
    def _remove(filepath: str) -> None:
        try:
            if os.path.exists(filepath):
                os.remove(filepath)
        except OSError:
            logger.exception("Could not remove upload %s", filepath)
