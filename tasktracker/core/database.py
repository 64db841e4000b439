from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from tasktracker.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Options du engine selon le backend (SQLite en dev/tests, Postgres en prod)"""
    if database_url.startswith("sqlite"):
        # sessions partagées entre les threads du serveur
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, echo=False, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Session par requête : le store injecté dans les services"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
