from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from scavenger_hunt.core.exceptions import ConflictError
from scavenger_hunt.infrastructure.db.models import EventModel
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.presentation.schemas.event_schema import EventCreate
from .slugs import slugify, unique_slug
import logging

logger = logging.getLogger(__name__)


def create_event(db: Session, data: EventCreate) -> EventModel:
    repo = EventRepository(db)
    if data.slug:
        slug = slugify(data.slug)
        if repo.slug_exists(slug):
            logger.warning(f"Attempt to create event with duplicate slug: {slug}")
            raise ConflictError(f"Slug '{slug}' is already taken")
    else:
        slug = unique_slug(data.title, repo.slug_exists)

    try:
        return repo.save_event(
            EventModel(
                title=data.title,
                slug=slug,
                description=data.description,
                date=data.date,
            )
        )
    except IntegrityError:
        db.rollback()
        logger.error(f"Database integrity error creating event slug={slug}", exc_info=True)
        raise ConflictError(f"Slug '{slug}' is already taken")


def check_slug(db: Session, slug: str) -> dict:
    normalized = slugify(slug)
    return {"slug": normalized, "available": not EventRepository(db).slug_exists(normalized)}
