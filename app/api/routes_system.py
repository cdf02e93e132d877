from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.db.session import check_db_health
from app.utils.resp import ok, err

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    """Liveness + database reachability for the process supervisor."""
    if not check_db_health(db):
        return err("Database unavailable", status_code=503, code="DB_UNAVAILABLE")
    return ok({"status": "ok", "service": settings.PROJECT_NAME, "database": "ok"})
