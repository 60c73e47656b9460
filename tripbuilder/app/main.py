"""FastAPI application."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tripbuilder.app.api.routes.checklist import router as checklist_router
from tripbuilder.app.api.routes.clients import router as clients_router
from tripbuilder.app.api.routes.follow_ups import router as follow_ups_router
from tripbuilder.app.api.routes.health import router as health_router
from tripbuilder.app.api.routes.metrics import router as metrics_router
from tripbuilder.app.api.routes.pricing import router as pricing_router
from tripbuilder.app.api.routes.versions import router as versions_router
from tripbuilder.app.config import get_settings
from tripbuilder.app.errors import (
    AtomicityError,
    InvalidTransitionError,
    NotFoundError,
    ValidationFailure,
)
from tripbuilder.app.utils.logging import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title="Travel Package Builder API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(pricing_router)
app.include_router(clients_router)
app.include_router(versions_router)
app.include_router(follow_ups_router)
app.include_router(checklist_router)


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field},
    )


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(
    request: Request, exc: InvalidTransitionError
) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(AtomicityError)
async def atomicity_handler(request: Request, exc: AtomicityError) -> JSONResponse:
    # Internal cause is logged where it happens
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "The change could not be saved, please try again"},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Travel Package Builder API", "version": "0.1.0"}
