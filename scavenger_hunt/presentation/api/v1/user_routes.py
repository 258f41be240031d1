from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from scavenger_hunt.application.registration_service import RegistrationService
from scavenger_hunt.core.config import Settings
from scavenger_hunt.core.exceptions import ScavengerHuntError
from scavenger_hunt.presentation.api.errors import to_http_exception
from scavenger_hunt.presentation.dependencies import (
    get_app_settings,
    get_current_participant,
    get_registration_service,
)
from scavenger_hunt.presentation.schemas.progress_schema import (
    ProgressFlag,
    ProgressOut,
    ProgressStats,
    QuestionWithStatus,
    RegisterOut,
    RegisterRequest,
    StartProgressOut,
    StartProgressRequest,
)
from scavenger_hunt.presentation.schemas.question_schema import QuestionPublicOut

import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=RegisterOut)
def register(
    payload: RegisterRequest,
    response: Response,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
):
    try:
        logger.info(f"Registering participant {payload.name!r} for event {payload.event_id}")
        result = service.register(payload.name, payload.event_id)
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Register route error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    response.set_cookie(
        key="user_id",
        value=result.user_id,
        max_age=settings.USER_COOKIE_MAX_AGE,
        httponly=False,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return RegisterOut(user_id=result.user_id, progress_id=result.progress_id, event_id=result.event_id)


@router.post("/progress", response_model=StartProgressOut)
def start_progress(
    payload: StartProgressRequest,
    user_id: str = Depends(get_current_participant),
    service: RegistrationService = Depends(get_registration_service),
):
    """Starts (or restarts) the participant's hunt for an event."""
    try:
        result = service.start_for_slug(user_id, payload.event_slug)
        return StartProgressOut(progress_id=result.progress_id, question_order=result.question_order)
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Progress start error for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/progress", response_model=ProgressOut)
def get_progress(
    event_id: Optional[str] = Query(default=None, alias="eventId"),
    user_id: str = Depends(get_current_participant),
    service: RegistrationService = Depends(get_registration_service),
):
    try:
        overview = service.progress_overview(user_id, event_id)
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Progress API error for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    questions = [
        QuestionWithStatus(
            **QuestionPublicOut.model_validate(item["question"]).model_dump(),
            answered=item["answered"],
            computed_status=item["computed_status"],
            ai_score=item["ai_score"],
            submission=item["submission"],
        )
        for item in overview["questions"]
    ]
    logger.info(
        f"Progress for user {user_id}: {overview['completed_count']}/{overview['total_count']}, "
        f"completed={overview['completed']}"
    )
    return ProgressOut(
        progress=ProgressFlag(completed=overview["completed"]),
        questions=questions,
        stats=ProgressStats(
            completed_count=overview["completed_count"],
            total_count=overview["total_count"],
        ),
    )
