import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from formbuilder.core.binder import is_empty_key
from formbuilder.core.builder import FormBuilder
from formbuilder.core.config import FormBuilderConfig, settings
from formbuilder.core.errors import InvalidDate
from formbuilder.core.introspection import classify_type, get_mapper, main_primary_key, record_classes
from formbuilder.db.base import Base
from formbuilder.db.session import get_db
from formbuilder.schemas.fields import FieldType
from formbuilder.schemas.submission import FieldError, SubmissionOut, errors_out
from formbuilder.schemas.widgets import FormSpec

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])


def get_form_config() -> FormBuilderConfig:
    return FormBuilderConfig.from_settings(settings)


def _record_class_or_404(table: str) -> type:
    cls = record_classes(Base.registry).get(table)
    if cls is None:
        raise HTTPException(status_code=404, detail=f"Unknown record type: {table}")
    return cls


def _parse_key(cls: type, raw: Any) -> Any:
    mapper = get_mapper(cls)
    pk = main_primary_key(mapper)
    if classify_type(mapper.columns[pk].type) is FieldType.INTEGER:
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail=f"Invalid {pk}: {raw!r}")
    return raw


def _get_record_or_404(db: Session, cls: type, raw_key: Any):
    record = db.get(cls, _parse_key(cls, raw_key))
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return record


@router.get("", response_model=list[str])
def list_forms():
    return sorted({m.local_table.name for m in Base.registry.mappers})


@router.get("/{table}", response_model=FormSpec)
def new_record_form(
    table: str,
    db: Session = Depends(get_db),
    config: FormBuilderConfig = Depends(get_form_config),
):
    cls = _record_class_or_404(table)
    return FormBuilder.create(cls(), db, config=config).get_form()


@router.get("/{table}/{record_id}", response_model=FormSpec)
def edit_record_form(
    table: str,
    record_id: str,
    db: Session = Depends(get_db),
    config: FormBuilderConfig = Depends(get_form_config),
):
    cls = _record_class_or_404(table)
    record = _get_record_or_404(db, cls, record_id)
    return FormBuilder.create(record, db, config=config).get_form()


@router.post("/{table}", response_model=SubmissionOut)
def submit_form(
    table: str,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    config: FormBuilderConfig = Depends(get_form_config),
):
    cls = _record_class_or_404(table)
    pk = main_primary_key(get_mapper(cls))

    # existing records are loaded first so unposted fields keep their values
    if pk is not None and not is_empty_key(payload.get(pk)):
        record = _get_record_or_404(db, cls, payload[pk])
    else:
        record = cls()

    fb = FormBuilder.create(record, db, config=config)
    try:
        result = fb.process_form(payload)
    except InvalidDate as e:
        logger.info("Rejected %s submission: %s", table, e)
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Invalid date",
                "errors": [FieldError(field=e.field, code="invalid_date", message=str(e)).model_dump()],
            },
        )

    if not result:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Validation failed",
                "errors": [err.model_dump() for err in errors_out(fb.get_validation_errors())],
            },
        )

    key = getattr(result.record, pk) if pk else None
    return SubmissionOut(
        persisted=True,
        operation=result.operation,
        id=None if key is None else str(key),
    )
