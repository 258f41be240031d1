from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from ..db.models import EventModel

logger = logging.getLogger(__name__)


class EventRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_events(self) -> List[EventModel]:
        events = self.db.query(EventModel).order_by(EventModel.created_at.asc()).all()
        logger.info(f"Retrieved {len(events)} events")
        return events

    def get_by_id(self, event_id: str) -> Optional[EventModel]:
        return self.db.query(EventModel).filter(EventModel.id == event_id).first()

    def get_by_slug(self, slug: str) -> Optional[EventModel]:
        return self.db.query(EventModel).filter(EventModel.slug == slug).first()

    def first_event(self) -> Optional[EventModel]:
        """The default event used when a participant registers without choosing one."""
        return (
            self.db.query(EventModel)
            .order_by(EventModel.created_at.asc(), EventModel.id.asc())
            .first()
        )

    def slug_exists(self, slug: str) -> bool:
        return self.db.query(EventModel.id).filter(EventModel.slug == slug).first() is not None

    def save_event(self, event: EventModel) -> EventModel:
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Created event: {event.title} (ID: {event.id}, slug: {event.slug})")
        return event
