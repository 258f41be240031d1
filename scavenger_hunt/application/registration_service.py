import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from scavenger_hunt.core.exceptions import NotFoundError, ValidationError
from scavenger_hunt.infrastructure.db.models import EventModel
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.infrastructure.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

COMPUTED_STATUS = {"correct": "accepted", "incorrect": "rejected"}


def computed_status(answer_status: Optional[str]) -> str:
    return COMPUTED_STATUS.get(answer_status, "pending")


@dataclass
class RegistrationResult:
    user_id: str
    progress_id: str
    event_id: str
    question_order: List[str] = field(default_factory=list)


class RegistrationService:
    """
    Participant registration and progress views. Registering (again) starts
    a fresh attempt: a newly shuffled question order and completed=False.
    """

    def __init__(
        self,
        *,
        user_repo: UserRepository,
        event_repo: EventRepository,
        question_repo: QuestionRepository,
        progress_repo: ProgressRepository,
        answer_repo: AnswerRepository,
        rng: Optional[random.Random] = None,
    ):
        self._users = user_repo
        self._events = event_repo
        self._questions = question_repo
        self._progress = progress_repo
        self._answers = answer_repo
        self._rng = rng or random.Random()

    def register(self, name: str, event_id: Optional[str] = None) -> RegistrationResult:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required")

        if event_id:
            event = self._events.get_by_id(event_id)
            if not event:
                raise NotFoundError("Event not found")
        else:
            event = self._events.first_event()
            if not event:
                raise NotFoundError("No events found")

        user = self._users.get_or_create(name)
        return self._start(user.id, event)

    def start_for_slug(self, user_id: str, event_slug: str) -> RegistrationResult:
        if not event_slug:
            raise ValidationError("eventSlug is required")
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")

        event = self._events.get_by_slug(event_slug)
        if not event:
            raise NotFoundError("Event not found")
        return self._start(user_id, event)

    def _start(self, user_id: str, event: EventModel) -> RegistrationResult:
        question_ids = self._questions.list_ids_for_event(event.id)
        if not question_ids:
            raise NotFoundError("No questions found for this event")

        order = list(question_ids)
        self._rng.shuffle(order)

        progress = self._progress.create_or_reset(user_id, event.id, order)
        logger.info(f"User {user_id} registered for event {event.id} with progress_id={progress.id}")
        return RegistrationResult(
            user_id=user_id,
            progress_id=progress.id,
            event_id=event.id,
            question_order=order,
        )

    def progress_overview(self, user_id: str, event_id: Optional[str] = None) -> Dict:
        """
        Questions in the participant's order with their answer status and overall stats.
        """
        if event_id and not self._events.get_by_id(event_id):
            raise NotFoundError("Event not found")

        progress = self._progress.get_for_user(user_id, event_id)
        if not progress:
            raise NotFoundError("No progress found for user")

        questions = {q.id: q for q in self._questions.list_for_event(progress.event_id)}
        answers = {a.question_id: a for a in self._answers.list_for_progress(progress.id)}

        order = [qid for qid in (progress.question_order or []) if qid in questions]
        # questions added after registration go last
        order += [qid for qid in questions if qid not in order]

        items = []
        for qid in order:
            question = questions[qid]
            answer = answers.get(qid)
            items.append(
                {
                    "question": question,
                    "answered": answer is not None and answer.status != "pending",
                    "computed_status": computed_status(answer.status if answer else None),
                    "ai_score": answer.ai_score if answer else None,
                    "submission": answer.submission if answer else None,
                }
            )

        total = self._progress.get_question_count(progress)
        completed_count = self._answers.count_correct(progress.id, progress.question_order)
        return {
            "progress_id": progress.id,
            "event_id": progress.event_id,
            "completed": bool(progress.completed),
            "questions": items,
            "completed_count": completed_count,
            "total_count": total,
        }
