"""Temporary-file previews for staged images."""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from food_ledger.domain.intake import ImageFile
from food_ledger.services.intake import PreviewStore

logger = logging.getLogger(__name__)

_SUFFIXES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


@dataclass
class TempFilePreviewStore(PreviewStore):
    """Writes each preview to its own temporary file."""

    directory: str | None = None

    def create(self, image: ImageFile) -> str:
        """Write the image to a temporary file and return its path."""
        suffix = _SUFFIXES.get(image.content_type.lower(), "")
        with tempfile.NamedTemporaryFile(
            prefix="preview-", suffix=suffix, dir=self.directory, delete=False
        ) as handle:
            handle.write(image.data)
        return handle.name

    def release(self, reference: str) -> None:
        """Delete the preview file if it still exists."""
        path = Path(reference)
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to remove preview %s", reference)
