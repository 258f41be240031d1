from typing import Any, List, Optional, Tuple
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import AnswerModel, ProgressModel
from ..db.models._ids import new_id
from ..db.upsert import dialect_insert

logger = logging.getLogger(__name__)


class AnswerRepository:
    """
    Answer store. Writes only flush; the calling service owns the transaction
    so the upsert and the completion check commit together.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_answer(self, progress_id: str, question_id: str) -> Optional[AnswerModel]:
        stmt = (
            select(AnswerModel)
            .where(
                AnswerModel.progress_id == progress_id,
                AnswerModel.question_id == question_id,
            )
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_for_user(self, user_id: str, question_id: str) -> Optional[AnswerModel]:
        return (
            self.db.query(AnswerModel)
            .join(ProgressModel, AnswerModel.progress_id == ProgressModel.id)
            .filter(
                ProgressModel.user_id == user_id,
                AnswerModel.question_id == question_id,
            )
            .first()
        )

    def upsert_answer(
        self,
        progress_id: str,
        question_id: str,
        *,
        submission: Any,
        status: str,
        ai_score: Optional[int],
        keep_correct: bool = False,
    ) -> Tuple[AnswerModel, bool]:
        """
        Insert or overwrite the single answer row for (progress_id, question_id).

        With keep_correct, a stored correct answer is only replaced by another
        correct one; the check runs inside the same statement. Returns the
        stored row and whether this write was applied.
        """
        logger.debug(f"Upserting answer progress_id={progress_id}, question_id={question_id}, status={status}")
        insert_stmt = dialect_insert(self.db, AnswerModel)

        if insert_stmt is not None:
            table = AnswerModel.__table__
            stmt = insert_stmt.values(
                id=new_id(),
                progress_id=progress_id,
                question_id=question_id,
                submission=submission,
                status=status,
                ai_score=ai_score,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["progress_id", "question_id"],
                set_={
                    "submission": stmt.excluded.submission,
                    "status": stmt.excluded.status,
                    "ai_score": stmt.excluded.ai_score,
                    "updated_at": func.now(),
                },
                where=or_(table.c.status != "correct", stmt.excluded.status == "correct") if keep_correct else None,
            )
            applied = self.db.execute(stmt).rowcount != 0
        else:
            applied = self._upsert_without_on_conflict(
                progress_id,
                question_id,
                submission=submission,
                status=status,
                ai_score=ai_score,
                keep_correct=keep_correct,
            )

        answer = self.find_answer(progress_id, question_id)
        if applied:
            logger.info(f"Stored answer_id={answer.id} for progress_id={progress_id}, question_id={question_id}")
        return answer, applied

    def _upsert_without_on_conflict(
        self, progress_id, question_id, *, submission, status, ai_score, keep_correct
    ) -> bool:
        existing = self.find_answer(progress_id, question_id)
        if existing is None:
            try:
                self.db.add(
                    AnswerModel(
                        progress_id=progress_id,
                        question_id=question_id,
                        submission=submission,
                        status=status,
                        ai_score=ai_score,
                    )
                )
                self.db.flush()
                return True
            except IntegrityError:
                # Lost the insert race; overwrite the row the other request created
                self.db.rollback()
                existing = self.find_answer(progress_id, question_id)
                if existing is None:
                    raise
        if keep_correct and existing.status == "correct" and status != "correct":
            return False
        existing.submission = submission
        existing.status = status
        existing.ai_score = ai_score
        self.db.flush()
        return True

    def count_correct(self, progress_id: str, question_ids: Optional[List[str]] = None) -> int:
        """Correct answers for a progress, limited to question_ids when given."""
        stmt = (
            select(func.count())
            .select_from(AnswerModel)
            .where(AnswerModel.progress_id == progress_id, AnswerModel.status == "correct")
        )
        if question_ids:
            stmt = stmt.where(AnswerModel.question_id.in_(question_ids))
        return int(self.db.execute(stmt).scalar_one())

    def recent_for_question(self, progress_id: str, question_id: str, limit: int = 3) -> List[AnswerModel]:
        return (
            self.db.query(AnswerModel)
            .filter(
                AnswerModel.progress_id == progress_id,
                AnswerModel.question_id == question_id,
            )
            .order_by(AnswerModel.updated_at.desc())
            .limit(limit)
            .all()
        )

    def list_for_progress(self, progress_id: str) -> List[AnswerModel]:
        return (
            self.db.query(AnswerModel)
            .filter(AnswerModel.progress_id == progress_id)
            .all()
        )
