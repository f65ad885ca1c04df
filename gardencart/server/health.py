from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(request: Request):
    db_ok = False
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False
    return {"status": "ok" if db_ok else "degraded", "db": db_ok}
