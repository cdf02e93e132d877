# app/db/session.py
from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

logger = logging.getLogger(__name__)


def make_engine(db_uri: str, *, echo: bool = False) -> Engine:
    if db_uri.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory DB must share one connection across sessions
        if db_uri in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_uri, echo=echo, future=True, **kwargs)

    return create_engine(
        db_uri,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=280,
        pool_size=10,
        max_overflow=20,
        future=True,
    )


def make_session_factory(eng: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=eng,
        future=True,
    )


engine: Engine = make_engine(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DB_ECHO)
SessionLocal = make_session_factory(engine)


def check_db_health(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False


def dispose_engine() -> None:
    engine.dispose()
    logger.info("Database engine disposed")
