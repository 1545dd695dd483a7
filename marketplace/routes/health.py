import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from marketplace.config import settings
from marketplace.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    database = "ok"
    try:
        session.exec(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Database ping failed: {e.__class__.__name__}")
        database = "failed"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "payment_authorizer": settings.PAYMENT_AUTHORIZER,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
