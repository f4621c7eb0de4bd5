# fleet_inspection/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + photo storage.
"""

import os
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from fleet_inspection.database import get_db
from fleet_inspection.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Upload directory presence and writability
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "uploads": "unknown",
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # Check photo storage
    upload_dir = settings.UPLOAD_DIR
    if not os.path.isdir(upload_dir):
        result["uploads"] = "missing"
        result["status"] = "degraded"
    elif not os.access(upload_dir, os.W_OK):
        result["uploads"] = "read-only"
        result["status"] = "degraded"
    else:
        result["uploads"] = "ok"

    return result
