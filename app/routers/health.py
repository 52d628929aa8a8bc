# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + open push channels.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_registry
from app.services.connection_registry import ConnectionRegistry

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), registry: ConnectionRegistry = Depends(get_registry)):
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "push": {
            "open_channels": len(registry),
            "identified_users": len(registry.identified_users()),
        },
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
