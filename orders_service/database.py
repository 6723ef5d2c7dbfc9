"""Engine and session setup for the orders store.

Webhooks are reconciled from FastAPI's threadpool, so SQLite connections
must be shareable across threads.
"""
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

import orders_service.config  # noqa: F401  loads .env


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def session_factory(bind):
    return sessionmaker(bind=bind, autoflush=False)


DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set. Check your .env file.")

engine = build_engine(DATABASE_URL)
SessionLocal = session_factory(engine)
Base = declarative_base()
