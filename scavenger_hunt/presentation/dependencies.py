from typing import Optional
import logging

import jwt
from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from scavenger_hunt.application.answer_evaluator import AnswerEvaluator
from scavenger_hunt.application.hint_service import HintService
from scavenger_hunt.application.registration_service import RegistrationService
from scavenger_hunt.application.scoring_oracle import ScoringOracle
from scavenger_hunt.core.config import Settings, get_settings
from scavenger_hunt.infrastructure.db.session import SessionLocal
from scavenger_hunt.infrastructure.llm.factory import build_llm_client
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.hint_repository import HintRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.infrastructure.repositories.user_repository import UserRepository
from scavenger_hunt.infrastructure.security.jwt_service import decode_access_token
from scavenger_hunt.infrastructure.storage.local_image_storage import LocalImageStorage

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/login", auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_app_settings() -> Settings:
    return get_settings()


# ---------------------------
# Identity
# ---------------------------

def get_current_participant(user_id: Optional[str] = Cookie(default=None)) -> str:
    """Participants are identified by the user_id cookie set at registration."""
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User ID is required",
        )
    return user_id


def admin_required(
    token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token, secret=settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    except jwt.PyJWTError as e:
        logger.warning(f"Token validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("role") != "ADMIN":
        logger.warning(f"Access denied for non-admin subject: {payload.get('sub')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrative privileges required",
        )
    return payload


# ---------------------------
# Services
# ---------------------------

def get_scoring_oracle(request: Request, settings: Settings = Depends(get_app_settings)) -> ScoringOracle:
    oracle = getattr(request.app.state, "scoring_oracle", None)
    if oracle is None:
        oracle = ScoringOracle(
            build_llm_client(settings, temperature=settings.SCORING_TEMPERATURE),
            build_llm_client(settings, temperature=settings.HINT_TEMPERATURE),
            timeout=settings.ORACLE_TIMEOUT_SECONDS,
        )
        request.app.state.scoring_oracle = oracle
    return oracle


def get_image_storage(settings: Settings = Depends(get_app_settings)) -> LocalImageStorage:
    return LocalImageStorage(settings.UPLOAD_ROOT)


def get_answer_evaluator(
    db: Session = Depends(get_db),
    oracle: ScoringOracle = Depends(get_scoring_oracle),
    storage: LocalImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_app_settings),
) -> AnswerEvaluator:
    return AnswerEvaluator(
        db=db,
        oracle=oracle,
        question_repo=QuestionRepository(db),
        answer_repo=AnswerRepository(db),
        progress_repo=ProgressRepository(db),
        image_storage=storage,
        overwrite_policy=settings.ANSWER_OVERWRITE_POLICY,
    )


def get_hint_service(
    db: Session = Depends(get_db),
    oracle: ScoringOracle = Depends(get_scoring_oracle),
    settings: Settings = Depends(get_app_settings),
) -> HintService:
    return HintService(
        db=db,
        oracle=oracle,
        question_repo=QuestionRepository(db),
        answer_repo=AnswerRepository(db),
        progress_repo=ProgressRepository(db),
        hint_repo=HintRepository(db),
        max_hints=settings.MAX_HINTS,
    )


def get_registration_service(db: Session = Depends(get_db)) -> RegistrationService:
    return RegistrationService(
        user_repo=UserRepository(db),
        event_repo=EventRepository(db),
        question_repo=QuestionRepository(db),
        progress_repo=ProgressRepository(db),
        answer_repo=AnswerRepository(db),
    )
