from typing import Optional
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ..db.models import UserModel

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()

    def find_by_name(self, name: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.name == name).first()

    def get_or_create(self, name: str) -> UserModel:
        user = self.find_by_name(name)
        if user:
            logger.debug(f"Existing participant user_id={user.id} for name={name!r}")
            return user

        user = UserModel(name=name)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            logger.error(f"Could not create participant name={name!r}", exc_info=True)
            raise
        logger.info(f"Created participant user_id={user.id} for name={name!r}")
        return user

    def count_users(self) -> int:
        return self.db.query(UserModel).count()
