import logging
import os

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db_config import get_db

APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


def check_database(db_session: Session) -> bool:
    try:
        db_session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: database error - {e}")
        return False


@router.get("/health")
def health_check(db_session: Session = Depends(get_db)):
    """
    Liveness plus database reachability.
    Answers 503 when the database can't be reached.
    """
    if check_database(db_session):
        return {"status": "ok", "database": "healthy", "version": APP_VERSION}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "degraded", "database": "unhealthy", "version": APP_VERSION},
    )


@router.get("/version")
def get_version():
    return {"version": APP_VERSION, "environment": ENVIRONMENT}
