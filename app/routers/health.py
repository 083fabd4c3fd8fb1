"""Health and readiness endpoints for deployment platforms."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
from database.connection import get_db
from utils.time import iso_utc, utc_now

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health():
    """Simple liveness probe - always returns ok if service is running."""
    return {"status": "ok", "ts": iso_utc(utc_now())}


@router.get("/readiness")
async def readiness(db: Session = Depends(get_db)):
    """Readiness probe - checks database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        return {"ready": True, "ts": iso_utc(utc_now()), "database": "connected"}
    except Exception as e:
        logger.warning(f"⚠️  Readiness check failed: {e}")
        return {"ready": False, "ts": iso_utc(utc_now()), "database": f"error: {str(e)}"}
