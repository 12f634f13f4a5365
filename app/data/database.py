# app/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.utils.settings import DATABASE_URL


class Base(DeclarativeBase):
    pass


def build_engine(url: str):
    #sqlite (testy, lokalnie) nie lubi sesji miedzy watkami
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    # rejestracja modeli w Base.metadata przed create_all
    import app.data.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
