"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import create_client

from food_ledger.adapters.function_analysis_client import HttpxFunctionAnalysisClient
from food_ledger.adapters.local_preview_store import TempFilePreviewStore
from food_ledger.adapters.openai_analysis_client import OpenAIAnalysisClient
from food_ledger.adapters.supabase_asset_store import SupabaseAssetStore
from food_ledger.adapters.supabase_food_entry_repository import (
    SupabaseFoodEntryRepository,
)
from food_ledger.adapters.supabase_goal_repository import SupabaseGoalRepository
from food_ledger.adapters.supabase_profile_repository import SupabaseProfileRepository
from food_ledger.adapters.supabase_summary_repository import SupabaseSummaryRepository
from food_ledger.config import Settings
from food_ledger.domain.entries import FoodEntry
from food_ledger.services.analysis import AnalysisService
from food_ledger.services.entries import EntryService
from food_ledger.services.goals import GoalTracker
from food_ledger.services.intake import ImageIntake, PreviewStore
from food_ledger.services.notifications import LoggingNotifier, Notifier
from food_ledger.services.profiles import ProfileService
from food_ledger.services.summaries import DailyAggregator

INFERENCE_BACKENDS = ("openai", "function")


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: AnalysisService
    entry_service: EntryService
    aggregator: DailyAggregator
    goal_tracker: GoalTracker
    profile_service: ProfileService
    preview_store: PreviewStore
    notifier: Notifier
    close_resources: Callable[[], Awaitable[None]]

    def create_intake(
        self,
        user_id: UUID | None,
        on_saved: Callable[[FoodEntry], None] | None = None,
    ) -> ImageIntake:
        """Create an image intake wired to the shared services."""
        return ImageIntake(
            user_id=user_id,
            analysis_service=self.analysis_service,
            entry_service=self.entry_service,
            preview_store=self.preview_store,
            notifier=self.notifier,
            on_saved=on_saved,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if resolved_settings.inference_backend not in INFERENCE_BACKENDS:
        raise ValueError(
            f"Unknown inference backend: {resolved_settings.inference_backend}"
        )
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    notifier = LoggingNotifier()
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    entry_repository = SupabaseFoodEntryRepository(supabase_client)
    aggregator = DailyAggregator(
        entry_reader=entry_repository,
        summary_repository=SupabaseSummaryRepository(supabase_client),
        profile_service=profile_service,
    )
    entry_service = EntryService(
        asset_store=SupabaseAssetStore(
            client=supabase_client, bucket=resolved_settings.storage_bucket
        ),
        repository=entry_repository,
        aggregator=aggregator,
        notifier=notifier,
    )
    analysis_client: OpenAIAnalysisClient | HttpxFunctionAnalysisClient
    if resolved_settings.inference_backend == "function":
        analysis_client = HttpxFunctionAnalysisClient.create(
            url=resolved_settings.function_url(),
            api_key=resolved_settings.supabase_service_key,
        )
    else:
        analysis_client = OpenAIAnalysisClient.create(
            api_key=resolved_settings.openai_api_key or "",
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    analysis_service = AnalysisService(
        client=analysis_client,
        timeout_seconds=resolved_settings.inference_timeout_seconds,
    )

    async def close_resources() -> None:
        await analysis_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        entry_service=entry_service,
        aggregator=aggregator,
        goal_tracker=GoalTracker(
            SupabaseGoalRepository(supabase_client), profile_service=profile_service
        ),
        profile_service=profile_service,
        preview_store=TempFilePreviewStore(resolved_settings.preview_dir),
        notifier=notifier,
        close_resources=close_resources,
    )
