from sqlmodel import SQLModel, create_engine, Session

from quizforge.config import DATABASE_URL
from quizforge import models  # noqa: F401  registers the tables on SQLModel.metadata

# SQLite connections are shared with FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def init_db() -> None:
    """Create all tables if they don't exist."""
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
