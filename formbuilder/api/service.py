from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from formbuilder.core.config import settings
from formbuilder.db.base import Base
from formbuilder.db.session import get_db

router = APIRouter(tags=["service"])


@router.get("/")
def root():
    return {
        "name": "Form Builder",
        "env": settings.APP_ENV,
        "docs": "/docs",
        "health": "/health",
        "forms": "/forms",
    }


@router.get("/health")
def health(db: Session = Depends(get_db)):
    # DB ping plus a sanity check that record types got registered
    db.execute(text("SELECT 1"))
    return {"status": "ok", "record_types": len(Base.registry.mappers)}
