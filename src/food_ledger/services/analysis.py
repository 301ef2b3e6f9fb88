"""Food analysis service backed by a remote inference client."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from food_ledger.domain.analysis import AnalysisResult, TotalNutrition
from food_ledger.domain.errors import InferenceError

logger = logging.getLogger(__name__)

TOTALS_TOLERANCE = 0.01
DEFAULT_TIMEOUT_SECONDS = 30.0

_NUMBER = {"type": "number", "minimum": 0.0}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foods": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "serving_size": {"type": "string"},
                    "calories": _NUMBER,
                    "protein_g": _NUMBER,
                    "carbs_g": _NUMBER,
                    "fat_g": _NUMBER,
                    "fiber_g": _NUMBER,
                    "sugar_g": _NUMBER,
                    "sodium_mg": _NUMBER,
                    "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                },
                "required": [
                    "name",
                    "description",
                    "serving_size",
                    "calories",
                    "protein_g",
                    "carbs_g",
                    "fat_g",
                    "fiber_g",
                    "sugar_g",
                    "sodium_mg",
                    "confidence",
                ],
                "additionalProperties": False,
            },
        },
        "total_nutrition": {
            "type": "object",
            "properties": {
                "total_calories": _NUMBER,
                "total_protein_g": _NUMBER,
                "total_carbs_g": _NUMBER,
                "total_fat_g": _NUMBER,
                "total_fiber_g": _NUMBER,
                "total_sugar_g": _NUMBER,
                "total_sodium_mg": _NUMBER,
            },
            "required": [
                "total_calories",
                "total_protein_g",
                "total_carbs_g",
                "total_fat_g",
                "total_fiber_g",
                "total_sugar_g",
                "total_sodium_mg",
            ],
            "additionalProperties": False,
        },
        "meal_analysis": {
            "type": "object",
            "properties": {
                "overall_healthiness": {"type": "string"},
                "meal_type": {
                    "type": "string",
                    "enum": ["breakfast", "lunch", "dinner", "snack", "other"],
                },
                "recommendations": {"type": "string"},
            },
            "required": ["overall_healthiness", "meal_type", "recommendations"],
            "additionalProperties": False,
        },
    },
    "required": ["foods", "total_nutrition", "meal_analysis"],
    "additionalProperties": False,
}

ANALYSIS_PROMPT = (
    "Identify every food item in the image. For each item return a short name, "
    "a one-sentence description, a serving size label, calories, protein, carbs, "
    "fat, fiber and sugar in grams, sodium in milligrams, and a confidence "
    "between 0 and 1. Return total_nutrition as the sum over all items, and a "
    "meal_analysis with an overall healthiness rating, the likely meal type and "
    "a short recommendation."
)


class AnalysisClient(Protocol):
    """Interface for a remote food analysis capability."""

    async def analyze(
        self,
        *,
        image_data_url: str,
        user_id: UUID,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return the raw analysis payload for an image."""


@dataclass
class AnalysisService:
    """Encodes images, calls the analysis client and validates results."""

    client: AnalysisClient
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    async def analyze(
        self, image_bytes: bytes, user_id: UUID, *, require_foods: bool = True
    ) -> AnalysisResult:
        """Analyze an image and return a normalized result.

        The client is called exactly once. Transport failures, timeouts,
        malformed payloads and empty results (when ``require_foods`` is set)
        are all reported as ``InferenceError``.
        """
        data_url = to_data_url(image_bytes)
        try:
            raw = await asyncio.wait_for(
                self.client.analyze(
                    image_data_url=data_url,
                    user_id=user_id,
                    prompt=ANALYSIS_PROMPT,
                    schema=ANALYSIS_SCHEMA,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            logger.warning("Food analysis timed out after %ss", self.timeout_seconds)
            raise InferenceError("Food analysis timed out") from exc
        except InferenceError:
            raise
        except Exception as exc:
            logger.exception("Food analysis request failed")
            raise InferenceError("Food analysis failed") from exc

        try:
            result = AnalysisResult.model_validate(raw)
        except PydanticValidationError as exc:
            logger.warning("Malformed analysis response: %s", exc)
            raise InferenceError("Food analysis returned a malformed response") from exc

        if require_foods and not result.foods:
            raise InferenceError("No food was detected in the image")
        return normalize_totals(result)


def normalize_totals(result: AnalysisResult) -> AnalysisResult:
    """Return the result with totals equal to the per-item sums."""
    computed = TotalNutrition.from_items(result.foods)
    reported = result.total_nutrition
    if reported is not None and reported.matches(computed, TOTALS_TOLERANCE):
        return result
    if reported is not None:
        logger.warning(
            "Analysis totals disagree with item sums; recomputing "
            "(reported %.2f kcal, items %.2f kcal)",
            reported.total_calories,
            computed.total_calories,
        )
    return result.model_copy(update={"total_nutrition": computed})


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
