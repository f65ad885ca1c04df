import importlib

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from gardencart.utils.logs import get_logger

log = get_logger("db")

Base = declarative_base()

# model modules must be imported before create_all so metadata is populated
MODEL_MODULES = [
    "gardencart.models.session_entry",
    "gardencart.models.user",
    "gardencart.models.product",
    "gardencart.models.cart",
    "gardencart.models.cart_item",
    "gardencart.models.order",
]


def make_engine(url: str) -> Engine:
    """
    Build an engine for `url`.

    In-memory SQLite gets a StaticPool so every session (and every thread,
    e.g. the TestClient worker) sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, future=True, echo=False, **kwargs)
    return create_engine(url, future=True, echo=False)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine, reset: bool = False) -> None:
    """Create all tables on `engine`; drop them first when `reset` is set."""
    for mod in MODEL_MODULES:
        importlib.import_module(mod)
    if reset:
        log.info("Resetting database...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    log.debug("Database initialized.")


def get_db(request: Request):
    SessionLocal = request.app.state.SessionLocal
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
