from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from fitandflex.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite connections are shared with FastAPI's worker threads
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,          # Max connections kept in the pool
        "max_overflow": 20,       # Extra connections when the pool is full
        "pool_timeout": 30,       # Max wait to obtain a connection
        "pool_recycle": 1800,     # Recycle connections every 30 min
        "pool_pre_ping": True,    # Check the connection before using it
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
