# smartbazaar/db.py
"""Database engine and session utilities.

`make_engine` and `make_session_factory` build isolated handles for tests and
other composition roots; the module-level `engine`/`SessionLocal` pair is the
one the FastAPI app wires in.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from . import config

Base = declarative_base()

def make_engine(url: str = config.DATABASE_URL, **kwargs):
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        # tuned pool settings for cloud DB
        kwargs.setdefault("pool_size", config.DB_POOL_SIZE)
        kwargs.setdefault("max_overflow", config.DB_MAX_OVERFLOW)
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)

def make_session_factory(bind):
    # expire_on_commit=False keeps committed rows readable after the unit of work closes
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)

engine = make_engine()
SessionLocal = make_session_factory(engine)

def get_session_factory():
    return SessionLocal