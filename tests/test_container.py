"""Tests for container wiring."""

import asyncio

import pytest

from food_ledger.adapters.function_analysis_client import HttpxFunctionAnalysisClient
from food_ledger.adapters.openai_analysis_client import OpenAIAnalysisClient
from food_ledger.containers import build_container
from food_ledger.domain.intake import IntakeState


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.analysis_service.client, OpenAIAnalysisClient)
    assert container.analysis_service.timeout_seconds == 30.0
    assert container.entry_service.aggregator is container.aggregator
    intake = container.create_intake(None)
    assert intake.state is IntakeState.SELECT
    asyncio.run(container.close_resources())


def test_build_container_uses_function_backend(settings) -> None:
    function_settings = settings.model_copy(update={"inference_backend": "function"})

    container = build_container(function_settings)

    client = container.analysis_service.client
    assert isinstance(client, HttpxFunctionAnalysisClient)
    assert client.url == (
        "https://example.supabase.co/functions/v1/analyze-food-image"
    )
    asyncio.run(container.close_resources())


def test_build_container_rejects_unknown_backend(settings) -> None:
    with pytest.raises(ValueError):
        build_container(settings.model_copy(update={"inference_backend": "local"}))


def test_create_intake_shares_services(container) -> None:
    saved = []
    intake = container.create_intake(None, on_saved=saved.append)

    assert intake.analysis_service is container.analysis_service
    assert intake.preview_store is container.preview_store
    assert intake.on_saved == saved.append
