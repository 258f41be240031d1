from typing import Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import HintStateModel
from ..db.models._ids import new_id
from ..db.upsert import dialect_insert

logger = logging.getLogger(__name__)


class HintRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_state(self, progress_id: str, question_id: str) -> Optional[HintStateModel]:
        stmt = (
            select(HintStateModel)
            .where(
                HintStateModel.progress_id == progress_id,
                HintStateModel.question_id == question_id,
            )
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_count(self, progress_id: str, question_id: str) -> int:
        state = self.get_state(progress_id, question_id)
        return state.hint_count if state else 0

    def try_increment(self, progress_id: str, question_id: str, *, max_hints: int, hint: str) -> Optional[int]:
        """
        Atomically count one more hint unless the cap is already reached.
        Returns the new count, or None when the cap was hit.
        """
        insert_stmt = dialect_insert(self.db, HintStateModel)
        table = HintStateModel.__table__

        if insert_stmt is not None:
            stmt = insert_stmt.values(
                id=new_id(),
                progress_id=progress_id,
                question_id=question_id,
                hint_count=1,
                last_hint=hint,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["progress_id", "question_id"],
                set_={
                    "hint_count": table.c.hint_count + 1,
                    "last_hint": stmt.excluded.last_hint,
                    "updated_at": func.now(),
                },
                where=table.c.hint_count < max_hints,
            )
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                return None
        else:
            state = self.get_state(progress_id, question_id)
            if state is None:
                self.db.add(
                    HintStateModel(
                        progress_id=progress_id,
                        question_id=question_id,
                        hint_count=1,
                        last_hint=hint,
                    )
                )
            elif state.hint_count >= max_hints:
                return None
            else:
                state.hint_count += 1
                state.last_hint = hint

        self.db.commit()
        count = self.get_count(progress_id, question_id)
        logger.info(f"Hint count for progress_id={progress_id}, question_id={question_id} is now {count}")
        return count
