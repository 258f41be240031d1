import logging
from typing import Dict, List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from scavenger_hunt.infrastructure.db.models import AnswerModel, EventModel, ProgressModel, UserModel
from scavenger_hunt.infrastructure.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def list_user_progress(db: Session) -> List[Dict]:
    """One row per (participant, event) with correct-answer counts."""
    correct_counts = (
        db.query(
            AnswerModel.progress_id.label("progress_id"),
            func.sum(case((AnswerModel.status == "correct", 1), else_=0)).label("correct"),
        )
        .group_by(AnswerModel.progress_id)
        .subquery()
    )

    rows = (
        db.query(ProgressModel, UserModel, EventModel, correct_counts.c.correct)
        .join(UserModel, ProgressModel.user_id == UserModel.id)
        .join(EventModel, ProgressModel.event_id == EventModel.id)
        .outerjoin(correct_counts, correct_counts.c.progress_id == ProgressModel.id)
        .order_by(ProgressModel.created_at.desc())
        .all()
    )

    result = []
    for progress, user, event, correct in rows:
        result.append(
            {
                "id": progress.id,
                "user_id": user.id,
                "name": user.name,
                "event_id": event.id,
                "event_title": event.title,
                "completed": bool(progress.completed),
                "completed_questions": int(correct or 0),
                "total_questions": len(progress.question_order or []),
                "created_at": progress.created_at,
            }
        )
    logger.info(f"Retrieved progress for {len(result)} participants")
    return result


def compute_metrics(db: Session, top: int = 5) -> Dict:
    progress_rows = list_user_progress(db)
    total_users = UserRepository(db).count_users()
    completed_users = len({row["user_id"] for row in progress_rows if row["completed"]})
    completion_rate = round(completed_users / total_users * 100, 1) if total_users else 0.0

    top_users = sorted(
        progress_rows,
        key=lambda row: (row["completed"], row["completed_questions"]),
        reverse=True,
    )[:top]

    return {
        "total_users": total_users,
        "completed_users": completed_users,
        "completion_rate": completion_rate,
        "top_users": top_users,
    }
