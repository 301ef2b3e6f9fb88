"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from food_ledger.api.models import (
    GoalCreateRequest,
    ImagePayload,
    ProfileUpdateRequest,
    SaveEntryRequest,
)
from food_ledger.app_logging import configure_logging
from food_ledger.config import parse_user_id
from food_ledger.containers import AppContainer
from food_ledger.domain.entries import MealType
from food_ledger.domain.errors import (
    AssetUploadError,
    FoodLedgerError,
    InferenceError,
    IntakeStateError,
    PersistenceError,
    ValidationError,
)
from food_ledger.services.entries import DEFAULT_HISTORY_LIMIT, entry_stats
from food_ledger.services.intake import validate_image

_ERROR_STATUS: dict[type[FoodLedgerError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    IntakeStateError: status.HTTP_409_CONFLICT,
    InferenceError: status.HTTP_502_BAD_GATEWAY,
    AssetUploadError: status.HTTP_502_BAD_GATEWAY,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def current_user(x_user_id: str | None = Header(default=None)) -> UUID:
    """Resolve the caller's identity from the X-User-Id header."""
    user_id = parse_user_id(x_user_id)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user_id


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(FoodLedgerError)
    async def handle_ledger_error(
        request: Request, exc: FoodLedgerError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        logger.info(
            "%s %s failed: %s", request.method, request.url.path, exc.__class__.__name__
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.__class__.__name__, "detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analysis")
    async def analyze(
        payload: ImagePayload, request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Analyze a food photo and return the normalized result."""
        state_container: AppContainer = request.app.state.container
        image = payload.to_image_file()
        validate_image(image)
        result = await state_container.analysis_service.analyze(image.data, user_id)
        return result.model_dump(mode="json")

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    async def save_entry(
        payload: SaveEntryRequest,
        request: Request,
        user_id: UUID = Depends(current_user),
    ) -> dict[str, object]:
        """Persist an analysis result as a food entry."""
        state_container: AppContainer = request.app.state.container
        image = payload.image.to_image_file() if payload.image else None
        if image is not None:
            validate_image(image)
        entry = await state_container.entry_service.save(
            user_id, payload.nutrition_data, image
        )
        return {"entry": entry}

    @app.get("/entries")
    async def list_entries(  # noqa: PLR0913
        request: Request,
        user_id: UUID = Depends(current_user),
        limit: int = DEFAULT_HISTORY_LIMIT,
        day: date | None = None,
        meal_type: MealType | None = None,
        search: str | None = None,
    ) -> dict[str, object]:
        """Return recent entries with totals for the filtered set."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.entry_service.recent_entries(
            user_id, limit=limit, day=day, meal_type=meal_type, search=search
        )
        return {"entries": entries, "stats": entry_stats(entries)}

    @app.get("/summaries/today")
    async def today_summary(
        request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Return today's summary, recomputed from entries."""
        state_container: AppContainer = request.app.state.container
        return {"summary": state_container.aggregator.today(user_id)}

    @app.get("/summaries/week")
    async def week_summary(
        request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Return week-to-date daily summaries and averages."""
        state_container: AppContainer = request.app.state.container
        return {"summary": state_container.aggregator.summarize_week(user_id)}

    @app.get("/summaries/month")
    async def month_summary(
        request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Return month-to-date daily summaries and averages."""
        state_container: AppContainer = request.app.state.container
        return {"summary": state_container.aggregator.summarize_month(user_id)}

    @app.get("/summaries/{day}")
    async def day_summary(
        day: date, request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Return the summary for a specific date."""
        state_container: AppContainer = request.app.state.container
        return {"summary": state_container.aggregator.refresh(user_id, day)}

    @app.get("/profile")
    async def get_profile(
        request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Return the caller's profile, creating it on first access."""
        state_container: AppContainer = request.app.state.container
        return {"profile": state_container.profile_service.get_profile(user_id)}

    @app.put("/profile")
    async def update_profile(
        payload: ProfileUpdateRequest,
        request: Request,
        user_id: UUID = Depends(current_user),
    ) -> dict[str, object]:
        """Apply a partial profile update."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.update_profile(
            user_id, payload.model_dump(exclude_unset=True)
        )
        return {"profile": profile}

    @app.get("/goals")
    async def list_goals(
        request: Request, user_id: UUID = Depends(current_user)
    ) -> dict[str, object]:
        """Return active goals with progress."""
        state_container: AppContainer = request.app.state.container
        return {"goals": state_container.goal_tracker.active_goals(user_id)}

    @app.post("/goals", status_code=status.HTTP_201_CREATED)
    async def create_goal(
        payload: GoalCreateRequest,
        request: Request,
        user_id: UUID = Depends(current_user),
    ) -> dict[str, object]:
        """Create a new active goal."""
        state_container: AppContainer = request.app.state.container
        goal = state_container.goal_tracker.create_goal(user_id, payload.to_draft())
        return {"goal": goal}

    return app
