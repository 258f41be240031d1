from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scavenger_hunt.core.exceptions import NotFoundError, StorageError, ValidationError
from scavenger_hunt.infrastructure.db.models import AnswerModel, ProgressModel, QuestionModel
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.infrastructure.storage.local_image_storage import LocalImageStorage
from .scoring_oracle import ScoringOracle, build_image_prompt, build_text_prompt

logger = logging.getLogger(__name__)

LAST_WRITE_WINS = "last_write_wins"
KEEP_CORRECT = "keep_correct"


# ---------------------------
# Domain Models
# ---------------------------

@dataclass
class CompletionState:
    completed: bool
    correct_count: int
    total_questions: int


@dataclass
class EvaluationResult:
    answer_id: str
    status: str
    ai_score: int
    explanation: str
    completed: bool
    correct_count: int
    total_questions: int
    applied: bool = True


# ---------------------------
# Answer Evaluator
# ---------------------------

class AnswerEvaluator:
    """
    Grades a submission, stores it as the single answer for its question and
    flips the participant's progress to completed once every question is correct.
    """

    def __init__(
        self,
        *,
        db: Session,
        oracle: ScoringOracle,
        question_repo: QuestionRepository,
        answer_repo: AnswerRepository,
        progress_repo: ProgressRepository,
        image_storage: Optional[LocalImageStorage] = None,
        overwrite_policy: str = LAST_WRITE_WINS,
    ):
        if overwrite_policy not in (LAST_WRITE_WINS, KEEP_CORRECT):
            raise ValueError(f"Unknown answer overwrite policy: {overwrite_policy}")

        self._db = db
        self._oracle = oracle
        self._questions = question_repo
        self._answers = answer_repo
        self._progress = progress_repo
        self._images = image_storage
        self._policy = overwrite_policy

    # ---------------------------
    # Public API
    # ---------------------------

    async def evaluate_and_store(
        self,
        progress_id: str,
        question_id: str,
        submission: Any,
        *,
        retry: bool = False,
    ) -> EvaluationResult:
        if not question_id or submission is None or (isinstance(submission, str) and not submission.strip()):
            raise ValidationError("questionId and submission are required")

        progress = self._progress.get_by_id(progress_id)
        if not progress:
            raise NotFoundError("No progress found for user")

        question = self._questions.find_question(progress.event_id, question_id)
        if not question:
            raise NotFoundError("Question not found")

        stored_submission = self._normalize_submission(question, submission)
        prompt, image_ref = self._build_prompt(question, stored_submission)

        verdict = await self._oracle.score(prompt, image_ref)
        threshold = question.ai_threshold or 0
        status = "correct" if verdict.score >= threshold else "incorrect"
        logger.info(
            f"Graded question_id={question.id} for progress_id={progress.id}: "
            f"score={verdict.score}, threshold={threshold}, status={status}"
        )

        try:
            answer, applied = self._store_answer(progress, question, stored_submission, status, verdict.score, retry)
            completion = self._recompute_completion(progress.id)
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error(f"Failed to store answer for progress_id={progress.id}, question_id={question.id}", exc_info=True)
            raise StorageError(str(exc)) from exc

        explanation = verdict.explanation
        if not applied:
            explanation = (
                f"This submission scored {verdict.score} and was not saved; your earlier "
                "correct answer was kept. Resubmit with retry to replace it."
            )

        return EvaluationResult(
            answer_id=answer.id,
            status=answer.status,
            ai_score=answer.ai_score if answer.ai_score is not None else verdict.score,
            explanation=explanation,
            completed=completion.completed,
            correct_count=completion.correct_count,
            total_questions=completion.total_questions,
            applied=applied,
        )

    # ---------------------------
    # Internal Logic
    # ---------------------------

    def _normalize_submission(self, question: QuestionModel, submission: Any) -> Any:
        if question.type == "image":
            url = submission.get("url") if isinstance(submission, dict) else None
            if not isinstance(url, str) or not url:
                raise ValidationError("Image questions require a submission of the form {url}")
            return {"url": url}

        if not question.expected_answer or not question.expected_answer.strip():
            raise ValidationError("Question missing expected answer")
        if not isinstance(submission, str):
            raise ValidationError("Submission must be a string for this question type")

        if question.type == "multiple_choice" and submission not in (question.options or {}):
            raise ValidationError("Submission is not one of the question's options")
        return submission

    def _build_prompt(self, question: QuestionModel, submission: Any) -> Tuple[str, Optional[str]]:
        if question.type == "image":
            if self._images is None:
                raise ValidationError("Image answers are not supported")
            image_ref = self._images.load_data_url(submission["url"])
            return build_image_prompt(question), image_ref
        return build_text_prompt(question, submission), None

    def _store_answer(
        self,
        progress: ProgressModel,
        question: QuestionModel,
        submission: Any,
        status: str,
        ai_score: int,
        retry: bool,
    ) -> Tuple[AnswerModel, bool]:
        answer, applied = self._answers.upsert_answer(
            progress.id,
            question.id,
            submission=submission,
            status=status,
            ai_score=ai_score,
            keep_correct=self._policy == KEEP_CORRECT and not retry,
        )
        if not applied:
            logger.info(
                f"Keeping correct answer_id={answer.id}; lower resubmission "
                f"(score={ai_score}) ignored without retry"
            )
        return answer, applied

    def _recompute_completion(self, progress_id: str) -> CompletionState:
        progress = self._progress.get_by_id(progress_id)
        total = self._progress.get_question_count(progress)
        correct = self._answers.count_correct(progress.id, progress.question_order)

        # The stored flag never goes back to false; the reported state is live
        completed = total > 0 and correct == total
        if completed and not progress.completed:
            self._progress.mark_completed(progress.id)

        logger.debug(f"Completion for progress_id={progress.id}: {correct}/{total}, completed={completed}")
        return CompletionState(completed=completed, correct_count=correct, total_questions=total)
