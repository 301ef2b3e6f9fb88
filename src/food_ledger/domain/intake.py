"""Domain models for image intake."""

from dataclasses import dataclass
from enum import StrEnum


class IntakeState(StrEnum):
    """States of the image intake flow."""

    SELECT = "select"
    ANALYZING = "analyzing"
    RESULTS = "results"
    SAVING = "saving"


@dataclass(frozen=True)
class ImageFile:
    """A candidate or staged image."""

    file_name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        """Return the payload size in bytes."""
        return len(self.data)
