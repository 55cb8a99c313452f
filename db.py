import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv
from contextlib import contextmanager

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL env var not set")

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

class Base(DeclarativeBase):
    pass

def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # local dev / tests; sessions may cross threads under the TestClient
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}

engine = create_engine(DATABASE_URL, future=True, echo=SQL_ECHO, **_engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

def init_db() -> None:
    """Create every table registered on Base (catalog, accounts, applications, recommendation cache)."""
    from models import models  # noqa: F401
    from recommendation.models import RecommendationCache  # noqa: F401
    Base.metadata.create_all(bind=engine)

@contextmanager
def get_db():
    """One unit of work: commit on success, roll back on any exception."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
