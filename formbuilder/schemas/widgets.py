from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field


class WidgetKind(str, Enum):
    HIDDEN = "hidden"
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    DATE_GROUP = "date-group"
    TIME_GROUP = "time-group"
    DATETIME_GROUP = "datetime-group"
    RADIO_GROUP = "radio-group"
    CHECKBOX = "checkbox"
    STATIC = "static"
    CUSTOM = "custom"
    SUBMIT = "submit"


class ValidationRule(BaseModel):
    kind: str  # numeric, required, ...
    param: Any | None = None
    message: str


class WidgetSpec(BaseModel):
    name: str
    kind: WidgetKind
    label: str | None = None
    options: list[tuple[Any, Any]] = Field(default_factory=list)
    rules: list[ValidationRule] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)
    format: str | None = None  # date/time/datetime groups
    group: str | None = None
    frozen: bool = False

    # user supplied widget object, kept verbatim for the renderer
    widget: Any | None = Field(default=None, exclude=True)


class WidgetGroup(BaseModel):
    name: str
    label: str
    elements: list[WidgetSpec]


class FormSpec(BaseModel):
    name: str
    header: str | None = None
    elements: list[Union[WidgetSpec, WidgetGroup]] = Field(default_factory=list)
    rules: dict[str, list[ValidationRule]] = Field(default_factory=dict)
    defaults: dict[str, Any] = Field(default_factory=dict)

    def widget(self, name: str) -> WidgetSpec | None:
        """Find a widget by field name, looking inside groups too."""
        for el in self.elements:
            if isinstance(el, WidgetGroup):
                for member in el.elements:
                    if member.name == name:
                        return member
            elif el.name == name:
                return el
        return None

    def group(self, name: str) -> WidgetGroup | None:
        for el in self.elements:
            if isinstance(el, WidgetGroup) and el.name == name:
                return el
        return None

    def remove(self, name: str) -> None:
        """Drop a widget (top-level or grouped) together with its rules and default."""
        kept = []
        for el in self.elements:
            if isinstance(el, WidgetGroup):
                el.elements = [m for m in el.elements if m.name != name]
                if el.elements:
                    kept.append(el)
            elif el.name != name:
                kept.append(el)
        self.elements = kept
        self.rules.pop(name, None)
        self.defaults.pop(name, None)

    @property
    def submit_widgets(self) -> list[WidgetSpec]:
        found = []
        for el in self.elements:
            members = el.elements if isinstance(el, WidgetGroup) else [el]
            found.extend(m for m in members if m.kind == WidgetKind.SUBMIT)
        return found
