"""Image intake state machine for photo-based food logging."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from food_ledger.domain.analysis import AnalysisResult
from food_ledger.domain.entries import FoodEntry
from food_ledger.domain.errors import (
    AssetUploadError,
    InferenceError,
    IntakeStateError,
    PersistenceError,
    ValidationError,
)
from food_ledger.domain.intake import ImageFile, IntakeState
from food_ledger.services.analysis import AnalysisService
from food_ledger.services.entries import EntryService
from food_ledger.services.identity import IdentitySource, Subscription
from food_ledger.services.notifications import Notifier

logger = logging.getLogger(__name__)

ACCEPTED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/webp"}
)
MAX_IMAGE_BYTES = 10 * 1024 * 1024


class PreviewStore(Protocol):
    """Local preview resources for staged images."""

    def create(self, image: ImageFile) -> str:
        """Materialize a preview and return its reference."""

    def release(self, reference: str) -> None:
        """Release a preview reference."""


def validate_image(candidate: ImageFile) -> None:
    """Raise ValidationError unless the image type and size are accepted."""
    if candidate.content_type.lower() not in ACCEPTED_CONTENT_TYPES:
        raise ValidationError("Please select a valid image file (JPG, PNG, or WebP)")
    if candidate.size > MAX_IMAGE_BYTES:
        raise ValidationError("Image file size must be less than 10MB")
    if candidate.size == 0:
        raise ValidationError("Image file is empty")


@dataclass
class ImageIntake:
    """Stages one photo at a time and drives it through analysis and saving.

    States move select -> analyzing -> results -> saving -> select. A failed
    analysis returns to select with the photo still staged; a failed save
    returns to results so the analysis is kept for a retry. A cancelled call
    returns to the state it started from.
    """

    user_id: UUID | None
    analysis_service: AnalysisService
    entry_service: EntryService
    preview_store: PreviewStore
    notifier: Notifier
    on_saved: Callable[[FoodEntry], None] | None = None
    state: IntakeState = field(default=IntakeState.SELECT, init=False)
    staged: ImageFile | None = field(default=None, init=False)
    preview_ref: str | None = field(default=None, init=False)
    result: AnalysisResult | None = field(default=None, init=False)
    disposed: bool = field(default=False, init=False)
    _generation: int = field(default=0, init=False, repr=False)
    _subscription: Subscription | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> "ImageIntake":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.dispose()

    def bind(self, identity_source: IdentitySource) -> None:
        """Follow identity changes from the given source until disposed."""
        self._ensure_alive()
        if self._subscription is not None:
            self._subscription.unsubscribe()
        self._subscription = identity_source.subscribe(self._on_identity_change)
        self._on_identity_change(identity_source.current)

    def select_file(self, candidate: ImageFile) -> None:
        """Validate and stage a photo, replacing any previous one."""
        self._ensure_alive()
        if self.state in {IntakeState.ANALYZING, IntakeState.SAVING}:
            raise IntakeStateError(f"Cannot select a file while {self.state}")
        try:
            validate_image(candidate)
        except ValidationError as exc:
            self.notifier.error(str(exc))
            raise

        preview_ref = self.preview_store.create(candidate)
        self._release_preview()
        self.staged = candidate
        self.preview_ref = preview_ref
        self.result = None
        self.state = IntakeState.SELECT
        self.notifier.success("Image selected successfully!")

    async def request_analysis(self) -> AnalysisResult | None:
        """Analyze the staged photo; only one analysis may be in flight.

        Returns None when the intake was reset or disposed before the analysis
        settled; the outcome is discarded.
        """
        self._ensure_alive()
        if self.state is not IntakeState.SELECT:
            raise IntakeStateError(f"Cannot start analysis while {self.state}")
        if self.staged is None:
            self.notifier.error("Please select an image first")
            raise ValidationError("No image staged")
        user_id = self._require_user()

        generation = self._generation
        self.state = IntakeState.ANALYZING
        try:
            result = await self.analysis_service.analyze(self.staged.data, user_id)
        except InferenceError:
            if self._is_stale(generation):
                logger.info("Analysis failed after intake was reset or disposed")
                return None
            self.state = IntakeState.SELECT
            self.notifier.error("Failed to analyze food. Please try again.")
            raise
        except asyncio.CancelledError:
            if not self._is_stale(generation):
                self.state = IntakeState.SELECT
            raise

        if self._is_stale(generation):
            logger.info("Discarding analysis for a reset or disposed intake")
            return None
        self.result = result
        self.state = IntakeState.RESULTS
        self.notifier.success("Food analysis complete!")
        return result

    async def save(self) -> FoodEntry | None:
        """Persist the current analysis with its photo.

        Returns None if the save failed after the intake was reset or disposed.
        """
        self._ensure_alive()
        if self.state is not IntakeState.RESULTS or self.result is None:
            raise IntakeStateError(f"Cannot save while {self.state}")
        user_id = self._require_user()

        generation = self._generation
        self.state = IntakeState.SAVING
        try:
            entry = await self.entry_service.save(user_id, self.result, self.staged)
        except (AssetUploadError, PersistenceError):
            if self._is_stale(generation):
                logger.info("Save failed after intake was reset or disposed")
                return None
            self.state = IntakeState.RESULTS
            self.notifier.error("Failed to save food entry. Please try again.")
            raise
        except asyncio.CancelledError:
            if not self._is_stale(generation):
                self.state = IntakeState.RESULTS
            raise

        if self._is_stale(generation):
            logger.info("Entry %s saved after intake was reset or disposed", entry.id)
            return entry
        self.notifier.success("Food entry saved successfully!")
        self._clear()
        if self.on_saved is not None:
            self.on_saved(entry)
        return entry

    def reset(self) -> None:
        """Release the preview and return to select with nothing staged."""
        self._clear()

    def dispose(self) -> None:
        """Release resources and stop following identity changes."""
        if self.disposed:
            return
        self._clear()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.disposed = True

    def _on_identity_change(self, user_id: UUID | None) -> None:
        if user_id != self.user_id:
            self._clear()
            self.user_id = user_id

    def _clear(self) -> None:
        self._generation += 1
        self._release_preview()
        self.staged = None
        self.result = None
        self.state = IntakeState.SELECT

    def _release_preview(self) -> None:
        if self.preview_ref is not None:
            self.preview_store.release(self.preview_ref)
            self.preview_ref = None

    def _is_stale(self, generation: int) -> bool:
        return self.disposed or generation != self._generation

    def _require_user(self) -> UUID:
        if self.user_id is None:
            raise IntakeStateError("No signed-in user")
        return self.user_id

    def _ensure_alive(self) -> None:
        if self.disposed:
            raise IntakeStateError("Intake has been disposed")
