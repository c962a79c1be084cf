from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Mapping

from formbuilder.core.config import FormBuilderConfig
from formbuilder.core.dates import fallback_value, is_blank_parts, is_composite, parts_to_value, to_storage
from formbuilder.core.errors import InvalidDate
from formbuilder.core.hooks import hooks_for
from formbuilder.core.introspection import get_mapper, introspect, main_primary_key
from formbuilder.core.persistence import SessionPersistence
from formbuilder.schemas.fields import Classification, FieldDescriptor, FieldType

logger = logging.getLogger(__name__)

_TEXT_TYPES = {FieldType.SHORTTEXT, FieldType.LONGTEXT, FieldType.ENUM, FieldType.UNKNOWN}
_TEMPORAL_TYPES = {FieldType.DATE, FieldType.TIME, FieldType.DATETIME}
_TRUE_STRINGS = {"1", "true", "on", "yes", "y", "t"}


@dataclass
class SubmissionResult:
    """Truthy iff an insert or update was performed."""
    persisted: bool
    operation: str | None = None  # "insert" | "update"
    record: Any = None
    validation_errors: Any = None

    def __bool__(self) -> bool:
        return self.persisted


def is_empty_key(value: Any) -> bool:
    return value is None or value == ""


def validation_failed(result: Any) -> bool:
    # validate() returns something falsy (or True) when the record is fine
    return bool(result) and result is not True


class SubmissionBinder:
    def __init__(self, config: FormBuilderConfig, persistence: SessionPersistence):
        self.config = config
        self.persistence = persistence
        self.validation_errors: Any = None

    def convert(self, record, posted: Mapping[str, Any]) -> dict[str, Any]:
        """
        Map posted values onto the record's fields without touching the record.

        Raises InvalidDate (unless the "today" policy is configured) before
        anything is assigned.
        """
        schema = introspect(record)
        assignments: dict[str, Any] = {}
        for name, value in posted.items():
            if name == self.config.submit_name:
                continue
            d = schema.field(name)
            if d is None:
                logger.debug("Posted field '%s' is not a field of %s, ignored", name, schema.table)
                continue
            assignments[name] = self.convert_value(d, value)
        return assignments

    def convert_value(self, d: FieldDescriptor, value: Any) -> Any:
        if is_composite(value):
            return self._from_parts(d, value)
        if isinstance(value, str):
            return self._from_string(d, value)
        return value

    def _from_parts(self, d: FieldDescriptor, parts: Mapping[str, Any]) -> Any:
        if is_blank_parts(parts) and d.nullable:
            return None
        try:
            value = parts_to_value(parts)
        except (TypeError, ValueError):
            value = self._invalid(d, parts)
        return self._store_temporal(d, value)

    def _invalid(self, d: FieldDescriptor, raw: Any) -> date | time | datetime:
        if self.config.invalid_date_policy == "today":
            logger.warning("Invalid date %r for '%s', using the current date", raw, d.name)
            if isinstance(raw, Mapping):
                return fallback_value(raw)
            now = datetime.now().replace(microsecond=0)
            return {FieldType.TIME: now.time(), FieldType.DATETIME: now}.get(d.type, now.date())
        raise InvalidDate(d.name, raw)

    def _store_temporal(self, d: FieldDescriptor, value: date | time | datetime) -> Any:
        output = self.config.date_output
        if output == "native":
            if d.type is FieldType.DATE and isinstance(value, datetime):
                value = value.date()
            elif d.type is FieldType.DATETIME and not isinstance(value, (datetime, time)):
                value = datetime(value.year, value.month, value.day)
            elif d.type not in _TEMPORAL_TYPES:
                # string column classified as a date: canonical YYYY-MM-DD
                output = "iso"
        return to_storage(value, output)

    def _from_string(self, d: FieldDescriptor, value: str) -> Any:
        t = d.type
        if t in _TEXT_TYPES and d.classification is not Classification.DATE:
            return value
        s = value.strip()
        if s == "":
            return None

        if t is FieldType.INTEGER:
            try:
                return int(s)
            except ValueError:
                return value
        if t is FieldType.FLOAT:
            try:
                return float(s)
            except ValueError:
                return value
        if t is FieldType.BOOLEAN:
            return s.lower() in _TRUE_STRINGS
        if t not in _TEMPORAL_TYPES and value == d.value:
            # stored string posted back unchanged, even if it is not ISO
            return value
        if t in _TEMPORAL_TYPES or d.classification is Classification.DATE:
            return self._store_temporal(d, self._parse_temporal(d, s))
        return value

    def _parse_temporal(self, d: FieldDescriptor, s: str) -> date | time | datetime:
        try:
            if d.type is FieldType.TIME:
                return time.fromisoformat(s)
            if d.type is FieldType.DATETIME:
                return datetime.fromisoformat(s)
            return date.fromisoformat(s)
        except ValueError:
            return self._invalid(d, s)

    def process(self, record, posted: Mapping[str, Any]) -> SubmissionResult:
        """
        Bind posted values onto `record`, validate if configured, then insert
        (empty primary key) or update. The returned result carries the
        persistent record, which may be a different instance after a merge.
        """
        hooks = hooks_for(record)
        hooks.pre_process(posted)

        assignments = self.convert(record, posted)
        for name, value in assignments.items():
            setattr(record, name, value)
            logger.debug("Field '%s' set to %r", name, value)

        self.validation_errors = None
        if self.config.validate_on_process:
            errors = hooks.validate()
            if validation_failed(errors):
                self.validation_errors = errors
                logger.info("Validation failed for %s: %s", type(record).__name__, errors)
                self.persistence.discard(record, list(assignments))
                hooks.post_process(posted)
                return SubmissionResult(persisted=False, record=record, validation_errors=errors)

        mapper = get_mapper(record)
        pk = main_primary_key(mapper)
        table = mapper.local_table.name
        if pk is None or is_empty_key(getattr(record, pk, None)):
            record = self.persistence.insert(record)
            operation = "insert"
            logger.info("Inserted %s (%s=%r)", table, pk, getattr(record, pk, None) if pk else None)
        else:
            record = self.persistence.update(record)
            operation = "update"
            logger.info("Updated %s (%s=%r)", table, pk, getattr(record, pk))

        hooks_for(record).post_process(posted)
        return SubmissionResult(persisted=True, operation=operation, record=record)
