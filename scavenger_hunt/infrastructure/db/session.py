from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from scavenger_hunt.core.config import get_settings
from .base import Base  # noqa: F401

settings = get_settings()

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
