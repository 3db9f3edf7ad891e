# reception/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + room occupancy.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from reception.database import get_db
from reception.services.occupancy_service import room_status
from reception.utils.logger import get_logger
from reception.utils.timeutils import utcnow

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Number of rooms currently at capacity
    """
    result = {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "rooms_full": None,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        result["rooms_full"] = sum(1 for room in room_status(db) if room["is_full"])
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        result["database"] = "error"
        result["status"] = "degraded"

    return result
