import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.errors import DependencyError

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.database_url


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
        # one shared connection, or every session sees an empty database
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(SQLALCHEMY_DATABASE_URL, **_engine_kwargs(SQLALCHEMY_DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def storage_errors(db: Session, action: str) -> Iterator[None]:
    """
    Roll back and re-raise any SQLAlchemy failure as a DependencyError.

        with storage_errors(db, "creating task"):
            db.add(task)
            db.commit()
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage error while %s", action)
        raise DependencyError("Something went wrong", error=str(exc)) from exc
