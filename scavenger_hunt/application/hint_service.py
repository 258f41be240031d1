import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scavenger_hunt.core.exceptions import (
    HintLimitReachedError,
    HintsDisabledError,
    NotFoundError,
    StorageError,
)
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.hint_repository import HintRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from .scoring_oracle import ScoringOracle, build_hint_prompt

logger = logging.getLogger(__name__)


@dataclass
class HintResult:
    hint: str
    hint_count: int
    max_hints: int


class HintService:
    """
    Hands out AI hints, at most max_hints per question. Every policy check
    runs before the oracle is called.
    """

    def __init__(
        self,
        *,
        db: Session,
        oracle: ScoringOracle,
        question_repo: QuestionRepository,
        answer_repo: AnswerRepository,
        progress_repo: ProgressRepository,
        hint_repo: HintRepository,
        max_hints: int = 2,
    ):
        self._db = db
        self._oracle = oracle
        self._questions = question_repo
        self._answers = answer_repo
        self._progress = progress_repo
        self._hints = hint_repo
        self.max_hints = max_hints

    async def request_hint(self, progress_id: str, question_id: str) -> HintResult:
        progress = self._progress.get_by_id(progress_id)
        if not progress:
            raise NotFoundError("No progress found for user")

        question = self._questions.find_question(progress.event_id, question_id)
        if not question:
            raise NotFoundError("Question not found")
        if not question.hint_enabled:
            raise HintsDisabledError()

        used = self._hints.get_count(progress.id, question.id)
        if used >= self.max_hints:
            logger.warning(f"Hint limit reached for progress_id={progress.id}, question_id={question.id}")
            raise HintLimitReachedError()

        attempts = self._answers.recent_for_question(progress.id, question.id, limit=3)
        hint = await self._oracle.hint(build_hint_prompt(question, attempts))

        try:
            new_count = self._hints.try_increment(
                progress.id, question.id, max_hints=self.max_hints, hint=hint
            )
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error(f"Failed to record hint for progress_id={progress.id}", exc_info=True)
            raise StorageError(str(exc)) from exc

        if new_count is None:
            # A concurrent request used up the last hint while we waited on the oracle
            self._db.rollback()
            raise HintLimitReachedError()

        logger.info(f"Granted hint {new_count}/{self.max_hints} for progress_id={progress.id}, question_id={question.id}")
        return HintResult(hint=hint, hint_count=new_count, max_hints=self.max_hints)
