from pydantic import BaseModel


class FieldError(BaseModel):
    """Individual validation error"""
    field: str | None = None
    code: str  # invalid, invalid_date, ...
    message: str


class SubmissionOut(BaseModel):
    persisted: bool
    operation: str | None  # insert | update
    id: str | None


def errors_out(errors) -> list[FieldError]:
    """Normalise whatever a record's validate() returned into FieldErrors."""
    if isinstance(errors, dict):
        return [FieldError(field=str(k), code="invalid", message=str(v)) for k, v in errors.items()]
    if isinstance(errors, (list, tuple, set)):
        return [FieldError(code="invalid", message=str(e)) for e in errors]
    return [FieldError(code="invalid", message=str(errors))]
