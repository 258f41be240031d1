import logging
from typing import Dict

from sqlalchemy.orm import Session

from scavenger_hunt.infrastructure.db.models import ProgressModel
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository

logger = logging.getLogger(__name__)


def backfill_completion(db: Session) -> Dict[str, int]:
    """
    Re-check every unfinished progress and mark the ones whose questions are
    all answered correctly. Completed progress is never reverted.
    """
    progress_repo = ProgressRepository(db)
    answer_repo = AnswerRepository(db)

    checked = 0
    updated = 0
    pending = db.query(ProgressModel).filter(ProgressModel.completed.is_(False)).all()
    for progress in pending:
        checked += 1
        total = progress_repo.get_question_count(progress)
        correct = answer_repo.count_correct(progress.id, progress.question_order)
        if total > 0 and correct == total and progress_repo.mark_completed(progress.id):
            updated += 1
            logger.info(f"Backfilled completion for progress_id={progress.id} ({correct}/{total})")

    db.commit()
    logger.info(f"Completion backfill done. checked={checked} updated={updated}")
    return {"checked": checked, "updated": updated}
