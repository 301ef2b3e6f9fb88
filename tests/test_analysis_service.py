"""Tests for the analysis service."""

import asyncio
from uuid import uuid4

import httpx
import pytest

from food_ledger.domain.entries import MealType
from food_ledger.domain.errors import InferenceError
from food_ledger.services.analysis import (
    ANALYSIS_SCHEMA,
    AnalysisService,
    normalize_totals,
    to_data_url,
)
from tests.conftest import (
    JPEG_HEADER,
    FakeAnalysisClient,
    analysis_payload,
    food_item,
)


def _service(client: FakeAnalysisClient, timeout: float = 1.0) -> AnalysisService:
    return AnalysisService(client=client, timeout_seconds=timeout)


def test_analyze_returns_validated_result() -> None:
    client = FakeAnalysisClient()
    user_id = uuid4()

    result = asyncio.run(_service(client).analyze(JPEG_HEADER + b"image", user_id))

    assert [food.name for food in result.foods] == ["Chicken rice bowl"]
    assert result.total_nutrition is not None
    assert result.total_nutrition.total_calories == 450
    assert result.meal_analysis.meal_type is MealType.LUNCH
    assert client.calls[0]["user_id"] == user_id
    assert str(client.calls[0]["image_data_url"]).startswith("data:image/jpeg;base64,")


def test_analyze_recomputes_mismatched_totals() -> None:
    payload = analysis_payload(
        foods=[food_item("Rice", calories=200), food_item("Chicken", calories=250)],
        totals={"total_calories": 900, "total_protein_g": 1},
    )
    client = FakeAnalysisClient(payload=payload)

    result = asyncio.run(_service(client).analyze(b"image", uuid4()))

    assert result.total_nutrition is not None
    assert result.total_nutrition.total_calories == 450
    assert result.total_nutrition.total_protein_g == 40
    assert result.total_nutrition.total_sodium_mg == 1240


def test_analyze_fills_missing_totals() -> None:
    payload = analysis_payload()
    del payload["total_nutrition"]
    client = FakeAnalysisClient(payload=payload)

    result = asyncio.run(_service(client).analyze(b"image", uuid4()))

    assert result.total_nutrition is not None
    assert result.total_nutrition.total_calories == 450


@pytest.mark.parametrize(
    "totals",
    [
        {"total_calories": -1, "total_protein_g": 20},
        {"total_calories": "lots"},
        "450 kcal",
    ],
)
def test_analyze_recomputes_out_of_range_totals(totals: object) -> None:
    payload = analysis_payload()
    payload["total_nutrition"] = totals
    client = FakeAnalysisClient(payload=payload)

    result = asyncio.run(_service(client).analyze(b"image", uuid4()))

    assert result.total_nutrition is not None
    assert result.total_nutrition.total_calories == 450
    assert result.total_nutrition.total_protein_g == 20


def test_analyze_maps_unknown_meal_type_to_other() -> None:
    client = FakeAnalysisClient(payload=analysis_payload(meal_type="brunch"))

    result = asyncio.run(_service(client).analyze(b"image", uuid4()))

    assert result.meal_analysis.meal_type is MealType.OTHER


@pytest.mark.parametrize(
    "payload",
    [
        {"foods": "rice"},
        analysis_payload(foods=[food_item(calories=-5)]),
        analysis_payload(foods=[food_item(confidence=1.5)]),
        analysis_payload(foods=[food_item(name="")]),
    ],
)
def test_analyze_rejects_malformed_payload(payload: dict[str, object]) -> None:
    client = FakeAnalysisClient(payload=payload)

    with pytest.raises(InferenceError):
        asyncio.run(_service(client).analyze(b"image", uuid4()))


def test_analyze_rejects_empty_food_list() -> None:
    client = FakeAnalysisClient(payload=analysis_payload(foods=[]))

    with pytest.raises(InferenceError):
        asyncio.run(_service(client).analyze(b"image", uuid4()))


def test_analyze_allows_empty_food_list_when_not_required() -> None:
    client = FakeAnalysisClient(payload=analysis_payload(foods=[]))

    result = asyncio.run(
        _service(client).analyze(b"image", uuid4(), require_foods=False)
    )

    assert result.foods == []
    assert result.total_nutrition is not None
    assert result.total_nutrition.total_calories == 0


def test_analyze_wraps_transport_errors_without_retrying() -> None:
    client = FakeAnalysisClient(error=httpx.ConnectError("connection refused"))

    with pytest.raises(InferenceError):
        asyncio.run(_service(client).analyze(b"image", uuid4()))

    assert len(client.calls) == 1


def test_analyze_times_out() -> None:
    client = FakeAnalysisClient(delay=0.5)

    with pytest.raises(InferenceError, match="timed out"):
        asyncio.run(_service(client, timeout=0.01).analyze(b"image", uuid4()))


def test_normalize_totals_keeps_matching_totals() -> None:
    client = FakeAnalysisClient()
    result = asyncio.run(_service(client).analyze(b"image", uuid4()))

    assert normalize_totals(result) is result


def test_schema_requires_every_top_level_section() -> None:
    assert ANALYSIS_SCHEMA["required"] == [
        "foods",
        "total_nutrition",
        "meal_analysis",
    ]


def test_to_data_url_uses_png_header() -> None:
    url = to_data_url(b"\x89PNG\r\n\x1a\n" + b"rest")

    assert url.startswith("data:image/png;base64,")


def test_to_data_url_detects_webp() -> None:
    url = to_data_url(b"RIFF\x00\x00\x00\x00WEBPVP8 ")

    assert url.startswith("data:image/webp;base64,")


def test_to_data_url_defaults_to_jpeg() -> None:
    url = to_data_url(b"unknown")

    assert url.startswith("data:image/jpeg;base64,")
