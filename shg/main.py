from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from shg.api import members, transactions, summary, reports, settings as settings_api
from shg.core.config import settings
from shg.core.exceptions import ValidationError, NotFoundError, StoreError
from shg.db.base import get_db
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Get logger for this module
logger = logging.getLogger(__name__)
logger.info("Starting Self-Help Group Ledger API")

VERSION = "1.0.0"

app = FastAPI(
    title="Self-Help Group Ledger API",
    description="Member savings, loans and interest sharing for a self-help group",
    version=VERSION,
    debug=settings.DEBUG,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(members.router)
app.include_router(transactions.router)
app.include_router(summary.router)
app.include_router(reports.router)
app.include_router(settings_api.router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "The ledger is temporarily unavailable. Nothing was saved; please try again."}
    )


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Self-Help Group Ledger API", "version": VERSION}


@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint, checks API and database connectivity."""
    db_status = "unreachable"
    db_error = None
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_error = str(e)

    status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": status,
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "ok",
            "database": db_status,
        },
        **({"database_error": db_error} if db_error else {})
    }
