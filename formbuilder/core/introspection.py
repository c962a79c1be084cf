from __future__ import annotations

import logging
from typing import Any

import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper, registry as Registry

from formbuilder.core.errors import NotARecordError
from formbuilder.schemas.fields import (
    FieldDescriptor,
    FieldType,
    FormOverrides,
    RecordSchema,
    Relation,
)

logger = logging.getLogger(__name__)


def get_mapper(obj) -> Mapper:
    """Mapper for a mapped instance or class; NotARecordError otherwise."""
    cls = obj if isinstance(obj, type) else type(obj)
    mapper = sa_inspect(cls, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise NotARecordError(obj)
    return mapper


def is_record(obj) -> bool:
    try:
        get_mapper(obj)
    except NotARecordError:
        return False
    return True


def table_name(mapper: Mapper) -> str:
    return mapper.local_table.name


def record_classes(reg: Registry) -> dict[str, type]:
    """table name -> mapped class, for every mapper in the registry."""
    out: dict[str, type] = {}
    for m in reg.mappers:
        out.setdefault(table_name(m), m.class_)
        out.setdefault(m.local_table.fullname, m.class_)
    return out


def resolve_record_class(reg: Registry, table: str) -> type | None:
    return record_classes(reg).get(table)


def classify_type(type_: sa.types.TypeEngine) -> FieldType:
    if isinstance(type_, sa.types.TypeDecorator):
        type_ = type_.impl_instance
    # subclasses first: Enum and Text are Strings, DateTime is not a Date
    if isinstance(type_, sa.Boolean):
        return FieldType.BOOLEAN
    if isinstance(type_, sa.Enum):
        return FieldType.ENUM
    if isinstance(type_, sa.Text):
        return FieldType.LONGTEXT
    if isinstance(type_, sa.String):
        return FieldType.SHORTTEXT
    if isinstance(type_, sa.Integer):
        return FieldType.INTEGER
    # Float is not a Numeric subclass on every SQLAlchemy release
    if isinstance(type_, (sa.Numeric, sa.Float)):
        return FieldType.FLOAT
    if isinstance(type_, sa.DateTime):
        return FieldType.DATETIME
    if isinstance(type_, sa.Date):
        return FieldType.DATE
    if isinstance(type_, sa.Time):
        return FieldType.TIME
    return FieldType.UNKNOWN


def primary_key_names(mapper: Mapper) -> list[str]:
    return [mapper.get_property_by_column(col).key for col in mapper.primary_key]


def main_primary_key(mapper: Mapper) -> str | None:
    """Explicit `form_primary_key` on the class, else the first mapped key."""
    explicit = getattr(mapper.class_, "form_primary_key", None)
    if explicit:
        return explicit
    keys = primary_key_names(mapper)
    return keys[0] if keys else None


def relation_for(column: sa.Column) -> Relation | None:
    for fk in column.foreign_keys:
        target_table, _, target_key = fk.target_fullname.rpartition(".")
        return Relation(target_table=target_table, target_key=target_key)
    return None


def collect_overrides(record) -> FormOverrides:
    """Read the override hints declared on the record's class."""
    cls = type(record)

    def attr(name, default):
        value = getattr(cls, name, None)
        return default if value is None else value

    order = attr("pre_def_order", None)
    return FormOverrides(
        predefined_widgets=dict(attr("pre_def_elements", {})),
        field_labels=dict(attr("field_labels", {})),
        date_fields=list(attr("date_fields", ())),
        text_fields=list(attr("text_fields", ())),
        radio_fields=list(attr("radio_fields", ())),
        static_fields=list(attr("static_fields", ())),
        fields_required=list(attr("fields_required", ())),
        fields_to_freeze=list(attr("fields_to_freeze", ())),
        select_add_empty=list(attr("select_add_empty", ())),
        select_display_fields=dict(attr("select_display_fields", {})),
        field_attributes={k: dict(v) for k, v in attr("field_attributes", {}).items()},
        field_order=list(order) if order is not None else None,
        groups=dict(attr("pre_def_groups", {})),
        date_element_format=attr("date_element_format", None),
    )


def snapshot_value(record, name: str) -> Any:
    return getattr(record, name, None)


def introspect(record, overrides: FormOverrides | None = None) -> RecordSchema:
    """Describe every mapped column of `record` in declaration order."""
    mapper = get_mapper(record)
    if overrides is None:
        overrides = collect_overrides(record)

    pks = primary_key_names(mapper)
    fields: list[FieldDescriptor] = []
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        name = prop.key
        relation = relation_for(column) if isinstance(column, sa.Column) else None
        if relation is not None:
            relation.display_field = overrides.select_display_fields.get(name)

        enum_choices = None
        ftype = classify_type(column.type)
        if ftype is FieldType.ENUM:
            enum_choices = list(column.type.enums)

        fields.append(
            FieldDescriptor(
                name=name,
                type=ftype,
                primary_key=name in pks,
                nullable=bool(getattr(column, "nullable", True)),
                relation=relation,
                choices=enum_choices,
                widget=overrides.predefined_widgets.get(name),
                label=overrides.field_labels.get(name),
                classification=overrides.classification_for(name),
                required=name in overrides.fields_required,
                add_empty_option=name in overrides.select_add_empty,
                attributes=overrides.field_attributes.get(name, {}),
                value=snapshot_value(record, name),
            )
        )

    logger.debug("Introspected %s: %s", table_name(mapper), [f.name for f in fields])
    return RecordSchema(
        table=table_name(mapper),
        class_name=mapper.class_.__name__,
        primary_keys=pks,
        primary_key=main_primary_key(mapper),
        fields=fields,
    )
