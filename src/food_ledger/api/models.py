"""Request bodies for the HTTP API."""

import base64
import binascii
from datetime import date

from pydantic import BaseModel, Field

from food_ledger.domain.analysis import AnalysisResult
from food_ledger.domain.errors import ValidationError
from food_ledger.domain.goals import GoalDraft, GoalType
from food_ledger.domain.intake import ImageFile


class ImagePayload(BaseModel):
    """Base64-encoded image, optionally as a data URL."""

    image_data: str = Field(alias="imageData")
    content_type: str = Field(alias="contentType")
    file_name: str = Field(default="upload.jpg", alias="fileName")

    model_config = {"populate_by_name": True}

    def to_image_file(self) -> ImageFile:
        """Decode the payload into an image file."""
        raw = self.image_data
        if raw.startswith("data:") and "," in raw:
            raw = raw.split(",", 1)[1]
        try:
            data = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("Image data is not valid base64") from exc
        return ImageFile(
            file_name=self.file_name, content_type=self.content_type, data=data
        )


class SaveEntryRequest(BaseModel):
    """Body for committing an analysis result."""

    nutrition_data: AnalysisResult = Field(alias="nutritionData")
    image: ImagePayload | None = None

    model_config = {"populate_by_name": True}


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; only provided fields are applied."""

    full_name: str | None = None
    email: str | None = None
    timezone: str | None = None
    daily_calorie_goal: float | None = None
    daily_protein_goal: float | None = None
    daily_carb_goal: float | None = None
    daily_fat_goal: float | None = None
    age: int | None = None
    gender: str | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    activity_level: str | None = None


class GoalCreateRequest(BaseModel):
    """Body for creating a goal."""

    goal_type: GoalType
    target_value: float
    unit: str = "kg"
    target_date: date | None = None
    current_value: float = 0.0

    def to_draft(self) -> GoalDraft:
        """Convert to a goal draft."""
        return GoalDraft(
            goal_type=self.goal_type,
            target_value=self.target_value,
            unit=self.unit,
            target_date=self.target_date,
            current_value=self.current_value,
        )
