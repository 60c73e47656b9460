"""Health check endpoints.

`/health` is the liveness probe; `/healthz` also checks the database.
"""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tripbuilder.app.config import Settings, get_settings
from tripbuilder.app.db.engine import create_engine_from_settings, create_session_factory

router = APIRouter()


def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        engine = create_engine_from_settings(settings)
        session_factory = create_session_factory(engine)

        with session_factory() as session:
            session.execute(text("SELECT 1"))

        engine.dispose()
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
def healthz() -> dict[str, Any] | JSONResponse:
    """Readiness check.

    Returns:
        200 with component status when the database answers
        503 otherwise
    """
    db_ok, db_status = check_db(get_settings())

    response_body = {
        "status": "ok" if db_ok else "degraded",
        "components": {"db": db_status},
    }

    if not db_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
