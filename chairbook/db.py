# chairbook/db.py

from sqlmodel import SQLModel, create_engine, Session

from chairbook.config import settings

# SQLite needs this to share connections with FastAPI's worker threads
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Engine = connection to the database
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    connect_args=connect_args,
)

def init_db(bind=None) -> None:
    # importing registers the tables on SQLModel.metadata
    from chairbook import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)

# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
