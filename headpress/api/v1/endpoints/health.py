# headpress/api/v1/endpoints/health.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from headpress.db.session import get_db
from headpress.services.storage import LocalObjectStore
from headpress.services.text_generator import NullTextGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", summary="Service health check")
def check_health(request: Request, db: Session = Depends(get_db)):
    """
    Checks the database with `SELECT 1`. The service is unhealthy (503)
    when the database is unreachable.
    """
    health_status = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "database": {"status": "unknown"},
            "object_store": {"status": "configured"},
            "ai_assist": {"status": "unknown"},
        },
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unreachable: {e}")
        health_status["services"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"

    store = request.app.state.object_store
    health_status["services"]["object_store"]["backend"] = (
        "local" if isinstance(store, LocalObjectStore) else "s3"
    )
    generator = request.app.state.text_generator
    health_status["services"]["ai_assist"] = {
        "status": "disabled" if isinstance(generator, NullTextGenerator) else "enabled"
    }

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)
    return health_status
