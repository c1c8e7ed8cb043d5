"""
SQLAlchemy engine, session factory and declarative Base for chat persistence.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import DATABASE_URL

# The 'check_same_thread' argument is only needed for SQLite.
engine_args = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, pool_pre_ping=True, **engine_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Create the users/chats/messages tables if they do not exist."""
    from app.db import models  # noqa: F401  (registers tables on Base)

    Base.metadata.create_all(bind=engine)


# Dependency to get a DB session in API routes.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
