"""
Health check endpoints
"""

import os

import psutil
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import DatabaseHealthCheck, get_db

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health/detailed")
def detailed_health_check(request: Request, db: Session = Depends(get_db)):
    """Database, admin token store and process resources"""
    health_status = {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "checks": {},
    }

    database = DatabaseHealthCheck.check_connection(db)
    health_status["checks"]["database"] = database
    if database["status"] != "healthy":
        health_status["status"] = "degraded"

    store = getattr(request.app.state, "admin_tokens", None)
    health_status["checks"]["admin_token_store"] = store.kind if store is not None else "missing"

    process = psutil.Process(os.getpid())
    health_status["checks"]["resources"] = {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "process_memory_mb": round(process.memory_info().rss / (1024 * 1024), 2),
        "memory_percent": psutil.virtual_memory().percent,
    }

    return health_status
