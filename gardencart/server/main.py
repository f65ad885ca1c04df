from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gardencart.config import settings
from gardencart.db import init_db, make_engine, make_session_factory
from gardencart.repositories.user_repo import UserRepository
from gardencart.server.catalogue import seed_catalogue
from gardencart.server.health import router as health_router
from gardencart.server.routes_auth import router as auth_router
from gardencart.server.routes_cart import router as cart_router
from gardencart.server.routes_catalogue import router as catalogue_router
from gardencart.server.routes_order import router as order_router
from gardencart.utils.logs import get_logger

log = get_logger("server")


def purge_expired_tokens(app: FastAPI) -> int:
    db = app.state.SessionLocal()
    try:
        n = UserRepository(db).purge_expired_tokens()
        db.commit()
    finally:
        db.close()
    if n:
        log.info(f"Purged {n} expired auth tokens")
    return n


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_expired_tokens,
        "interval",
        args=[app],
        seconds=settings.TOKEN_PURGE_INTERVAL_SECONDS,
        id="purge_expired_tokens",
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


def create_app(
    database_url: Optional[str] = None,
    cart_response_shape: Optional[str] = None,
    seed: Optional[bool] = None,
) -> FastAPI:
    """
    Build the stub marketplace backend the client talks to in development
    and tests. Each app owns its engine, so tests can run one per case on
    in-memory SQLite.
    """
    app = FastAPI(title="Garden Marketplace - Stub API", version="0.1.0", lifespan=lifespan)

    engine = make_engine(database_url or settings.DATABASE_URL)
    init_db(engine)
    app.state.engine = engine
    app.state.SessionLocal = make_session_factory(engine)
    app.state.cart_response_shape = cart_response_shape or settings.STUB_CART_RESPONSE_SHAPE

    if settings.SEED_CATALOGUE if seed is None else seed:
        db = app.state.SessionLocal()
        try:
            seed_catalogue(db)
        finally:
            db.close()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.FRONTEND_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        # the client reads `message` from every error body
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(catalogue_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    return app
