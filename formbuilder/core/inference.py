from __future__ import annotations

import logging
from typing import Any

from formbuilder.core.config import DEFAULT_ELEMENT_TYPE_MAP, FormBuilderConfig
from formbuilder.core.options import OptionListResolver
from formbuilder.schemas.fields import Classification, FieldDescriptor, FieldType
from formbuilder.schemas.widgets import ValidationRule, WidgetKind, WidgetSpec

logger = logging.getLogger(__name__)

# field types whose widget comes straight from the element type map
_MAPPED_TYPES = {
    FieldType.DATE: "date",
    FieldType.TIME: "time",
    FieldType.DATETIME: "datetime",
    FieldType.BOOLEAN: "boolean",
    FieldType.LONGTEXT: "longtext",
}


def default_label(name: str) -> str:
    return name[:1].upper() + name[1:]


class WidgetInferenceEngine:
    """
    Chooses one WidgetSpec per field.

    First match wins:
      1. predefined widget for the field, used as is
      2. classification override (date / text / radio / static)
      3. declared type (relations on integer fields become selects)
    Primary keys are always hidden, whatever the steps above produced.
    """

    def __init__(
        self,
        config: FormBuilderConfig,
        options: OptionListResolver | None = None,
        date_element_format: str | None = None,
    ):
        self.config = config
        self.options = options
        self.date_element_format = date_element_format or config.date_element_format

    def label_for(self, d: FieldDescriptor) -> str:
        return d.label or default_label(d.name)

    def infer(self, d: FieldDescriptor) -> WidgetSpec:
        label = self.label_for(d)
        if d.primary_key:
            return WidgetSpec(name=d.name, kind=WidgetKind.HIDDEN, label=label)

        if d.widget is not None:
            # no rules or attributes are layered onto predefined widgets
            return self._predefined(d, label)

        widget = self._by_classification(d, label)
        if widget is None:
            widget = self._by_type(d, label)

        if d.required:
            widget.rules.append(
                ValidationRule(kind="required", message=self._message(self.config.required_rule_message, label))
            )
        widget.attributes = {
            **self.config.element_type_attributes.get(widget.kind.value, {}),
            **d.attributes,
        }
        return widget

    def _predefined(self, d: FieldDescriptor, label: str) -> WidgetSpec:
        if isinstance(d.widget, WidgetSpec):
            return d.widget.model_copy(deep=True)
        return WidgetSpec(name=d.name, kind=WidgetKind.CUSTOM, label=label, widget=d.widget)

    def _by_classification(self, d: FieldDescriptor, label: str) -> WidgetSpec | None:
        c = d.classification
        if c is None:
            return None
        if c is Classification.DATE:
            return self._widget(d, label, WidgetKind.DATE_GROUP, format=self.date_element_format)
        if c is Classification.TEXT:
            return self._widget(d, label, WidgetKind.TEXTAREA)
        if c is Classification.RADIO:
            return self._widget(d, label, WidgetKind.RADIO_GROUP, options=self._choices(d))
        return self._widget(d, label, WidgetKind.STATIC)

    def _by_type(self, d: FieldDescriptor, label: str) -> WidgetSpec:
        t = d.type
        if t is FieldType.INTEGER:
            if d.relation is not None:
                return self._select(d, label, self._choices(d))
            return self._numeric(d, label, "integer")

        if t is FieldType.FLOAT:
            return self._numeric(d, label, "float")

        if t in _MAPPED_TYPES:
            category = _MAPPED_TYPES[t]
            kind = self._kind(category)
            return self._widget(d, label, kind, format=self._format_for(kind))

        if t is FieldType.SHORTTEXT:
            if isinstance(d.value, str) and "\n" in d.value:
                return self._widget(d, label, WidgetKind.TEXTAREA)
            return self._widget(d, label, self._kind("shorttext"))

        if t is FieldType.ENUM:
            return self._select(d, label, self._choices(d))

        return self._widget(d, label, WidgetKind.TEXT)

    def _widget(self, d: FieldDescriptor, label: str, kind: WidgetKind, **extra: Any) -> WidgetSpec:
        return WidgetSpec(name=d.name, kind=kind, label=label, **extra)

    def _numeric(self, d: FieldDescriptor, label: str, category: str) -> WidgetSpec:
        widget = self._widget(d, label, self._kind(category))
        widget.rules.append(
            ValidationRule(kind="numeric", message=self._message(self.config.rule_violation_message, label))
        )
        return widget

    def _select(self, d: FieldDescriptor, label: str, options: list[tuple[Any, Any]]) -> WidgetSpec:
        if d.add_empty_option:
            options = [("", self.config.select_add_empty_label), *options]
        return self._widget(d, label, self._kind("select"), options=options)

    def _choices(self, d: FieldDescriptor) -> list[tuple[Any, Any]]:
        if d.relation is not None:
            if self.options is None:
                return []
            return self.options.resolve(d.relation)
        if d.choices:
            return [(c, c) for c in d.choices]
        return []

    def _kind(self, category: str) -> WidgetKind:
        value = self.config.widget_kind_for(category)
        try:
            return WidgetKind(value)
        except ValueError:
            logger.warning("Unknown widget kind %r mapped for '%s', using default", value, category)
            return WidgetKind(DEFAULT_ELEMENT_TYPE_MAP.get(category, "text"))

    def _format_for(self, kind: WidgetKind) -> str | None:
        if kind is WidgetKind.DATE_GROUP:
            return self.date_element_format
        if kind is WidgetKind.TIME_GROUP:
            return self.config.time_element_format
        if kind is WidgetKind.DATETIME_GROUP:
            return self.config.datetime_element_format
        return None

    @staticmethod
    def _message(template: str, label: str) -> str:
        return template % label if "%s" in template else template
