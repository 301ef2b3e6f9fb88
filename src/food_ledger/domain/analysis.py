"""Models for food analysis results."""

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from food_ledger.domain.entries import MealType

NUTRIENT_FIELDS = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "fiber_g",
    "sugar_g",
    "sodium_mg",
)


class FoodItem(BaseModel):
    """Single detected food item."""

    name: str = Field(min_length=1)
    description: str = ""
    serving_size: str = "1 serving"
    calories: float = Field(ge=0.0)
    protein_g: float = Field(default=0.0, ge=0.0)
    carbs_g: float = Field(default=0.0, ge=0.0)
    fat_g: float = Field(default=0.0, ge=0.0)
    fiber_g: float = Field(default=0.0, ge=0.0)
    sugar_g: float = Field(default=0.0, ge=0.0)
    sodium_mg: float = Field(default=0.0, ge=0.0)
    confidence: float = Field(ge=0.0, le=1.0)


class TotalNutrition(BaseModel):
    """Sum of nutrition over all detected items."""

    total_calories: float = Field(default=0.0, ge=0.0)
    total_protein_g: float = Field(default=0.0, ge=0.0)
    total_carbs_g: float = Field(default=0.0, ge=0.0)
    total_fat_g: float = Field(default=0.0, ge=0.0)
    total_fiber_g: float = Field(default=0.0, ge=0.0)
    total_sugar_g: float = Field(default=0.0, ge=0.0)
    total_sodium_mg: float = Field(default=0.0, ge=0.0)

    @classmethod
    def from_items(cls, items: list[FoodItem]) -> "TotalNutrition":
        """Build totals by summing item fields."""
        return cls(
            **{
                f"total_{name}": sum(getattr(item, name) for item in items)
                for name in NUTRIENT_FIELDS
            }
        )

    def matches(self, other: "TotalNutrition", tolerance: float) -> bool:
        """Return True when every field is within tolerance of the other."""
        return all(
            abs(getattr(self, f"total_{name}") - getattr(other, f"total_{name}"))
            <= tolerance
            for name in NUTRIENT_FIELDS
        )


class MealAnalysis(BaseModel):
    """Overall assessment of the meal."""

    overall_healthiness: str = "unknown"
    meal_type: MealType = MealType.OTHER
    recommendations: str = ""

    @field_validator("meal_type", mode="before")
    @classmethod
    def _coerce_meal_type(cls, value: object) -> MealType:
        return MealType.parse(value)


class AnalysisResult(BaseModel):
    """Structured output of food analysis for one image."""

    foods: list[FoodItem]
    total_nutrition: TotalNutrition | None = None
    meal_analysis: MealAnalysis = Field(default_factory=MealAnalysis)

    @field_validator("total_nutrition", mode="wrap")
    @classmethod
    def _drop_invalid_totals(
        cls, value: object, handler: ValidatorFunctionWrapHandler
    ) -> TotalNutrition | None:
        # Reported totals are advisory; unusable ones are recomputed from items.
        try:
            return handler(value)
        except ValidationError:
            return None
