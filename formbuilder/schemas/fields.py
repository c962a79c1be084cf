from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FieldType(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    SHORTTEXT = "shorttext"
    LONGTEXT = "longtext"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    ENUM = "enum"
    UNKNOWN = "unknown"


class Classification(str, Enum):
    """Per-field overrides of the type-driven widget choice."""
    DATE = "date"
    TEXT = "text"
    RADIO = "radio"
    STATIC = "static"


class Relation(BaseModel):
    """Foreign key from a field to the key column of another table."""
    target_table: str
    target_key: str
    display_field: str | None = None  # per-field override of the option label column


class FieldDescriptor(BaseModel):
    name: str
    type: FieldType = FieldType.UNKNOWN
    primary_key: bool = False
    nullable: bool = True

    relation: Relation | None = None
    choices: list[str] | None = None  # enum columns only

    # overrides (None / empty = auto)
    widget: Any | None = None
    label: str | None = None
    classification: Classification | None = None
    required: bool = False
    add_empty_option: bool = False
    attributes: dict[str, Any] = Field(default_factory=dict)

    # current in-memory value on the record
    value: Any | None = None


class FormOverrides(BaseModel):
    """
    Override hints collected from a record class (see FormRecordMixin) plus
    anything injected by the pre-generation hook.
    """
    predefined_widgets: dict[str, Any] = Field(default_factory=dict)
    field_labels: dict[str, str] = Field(default_factory=dict)
    date_fields: list[str] = Field(default_factory=list)
    text_fields: list[str] = Field(default_factory=list)
    radio_fields: list[str] = Field(default_factory=list)
    static_fields: list[str] = Field(default_factory=list)
    fields_required: list[str] = Field(default_factory=list)
    fields_to_freeze: list[str] = Field(default_factory=list)
    select_add_empty: list[str] = Field(default_factory=list)
    select_display_fields: dict[str, str] = Field(default_factory=dict)
    field_attributes: dict[str, dict[str, Any]] = Field(default_factory=dict)
    field_order: list[str] | None = None
    groups: dict[str, str] = Field(default_factory=dict)

    date_element_format: str | None = None

    def classification_for(self, name: str) -> Classification | None:
        # same precedence as the inference rules: date before text
        if name in self.date_fields:
            return Classification.DATE
        if name in self.text_fields:
            return Classification.TEXT
        if name in self.radio_fields:
            return Classification.RADIO
        if name in self.static_fields:
            return Classification.STATIC
        return None


class RecordSchema(BaseModel):
    """Introspected shape of one record: table, keys and fields in natural order."""
    table: str
    class_name: str
    primary_keys: list[str]
    primary_key: str | None = None  # the key used for insert/update decisions
    fields: list[FieldDescriptor] = Field(default_factory=list)

    def field(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]
