from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.db.base import get_db
from app.core.config import settings
from app.core.logging import setup_logging
from app.routers import status as status_router
from app.routers import profile as profile_router
from app.routers import activities as activities_router
from app.routers import templates as templates_router
from app.core.errors import (
    StatusAppException,
    status_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title="Status Dashboard API",
    description=(
        "**Context-aware status synthesis**\n\n"
        "Turns free-text status updates into structured dashboards with an LLM, "
        "carrying still-relevant context forward from the previous update and "
        "tracking personal-state trends between updates.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(StatusAppException, status_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(status_router.router)
app.include_router(profile_router.router)
app.include_router(activities_router.router)
app.include_router(templates_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable, HTTP 503 otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {
        "status": "ok",
        "db": "ok",
        "env": settings.APP_ENV,
        "llm_provider": settings.llm_provider,
    }
