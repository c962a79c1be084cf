from __future__ import annotations

import logging
from typing import Any

from formbuilder.core.config import FormBuilderConfig
from formbuilder.core.dates import date_to_parts, datetime_to_parts, time_to_parts
from formbuilder.core.inference import WidgetInferenceEngine
from formbuilder.core.introspection import collect_overrides, introspect
from formbuilder.core.options import OptionListResolver
from formbuilder.schemas.fields import FieldDescriptor, FormOverrides, RecordSchema
from formbuilder.schemas.widgets import FormSpec, WidgetGroup, WidgetKind, WidgetSpec

logger = logging.getLogger(__name__)

_TO_PARTS = {
    WidgetKind.DATE_GROUP: date_to_parts,
    WidgetKind.TIME_GROUP: time_to_parts,
    WidgetKind.DATETIME_GROUP: datetime_to_parts,
}


def ordered_fields(schema: RecordSchema, order: list[str] | None) -> list[FieldDescriptor]:
    """
    Apply an explicit field order if it is an exact permutation of the
    schema's field names; anything else falls back to natural order.
    """
    if order is None:
        return list(schema.fields)

    names = schema.field_names
    if len(order) != len(names) or len(set(order)) != len(order) or set(order) != set(names):
        logger.debug(
            "Field order for %s ignored: %s is not a permutation of %s",
            schema.table,
            order,
            names,
        )
        return list(schema.fields)

    by_name = {f.name: f for f in schema.fields}
    return [by_name[n] for n in order]


def default_value(widget: WidgetSpec, value: Any) -> Any:
    to_parts = _TO_PARTS.get(widget.kind)
    if to_parts is None or value is None:
        return value
    parts = to_parts(value)
    if parts is None:
        # unreadable stored value: show it as is rather than blank it
        logger.debug("Keeping raw default %r for %s", value, widget.name)
        return value
    return parts


class FormAssembler:
    def __init__(self, config: FormBuilderConfig, options: OptionListResolver | None = None):
        self.config = config
        self.options = options

    def assemble(self, record, overrides: FormOverrides | None = None) -> FormSpec:
        if overrides is None:
            overrides = collect_overrides(record)
        schema = introspect(record, overrides)
        engine = WidgetInferenceEngine(
            self.config,
            self.options,
            date_element_format=overrides.date_element_format,
        )

        form = FormSpec(name=self.config.form_name or schema.class_name)
        if self.config.add_form_header:
            form.header = self.config.form_header_text or schema.table

        submit_key = self.config.submit_name
        groups: dict[str, list[WidgetSpec]] = {}
        defaults: dict[str, Any] = {}

        for d in ordered_fields(schema, overrides.field_order):
            widget = engine.infer(d)
            if d.name in overrides.fields_to_freeze:
                widget.frozen = True

            for rule in widget.rules:
                form.rules.setdefault(d.name, []).append(rule)

            group = overrides.groups.get(d.name)
            if group is not None:
                widget.group = group
                groups.setdefault(group, []).append(widget)
            else:
                form.elements.append(widget)

            defaults[d.name] = default_value(widget, d.value)

        submit = WidgetSpec(name=submit_key, kind=WidgetKind.SUBMIT, label=self.config.submit_text)
        submit_group = overrides.groups.get(submit_key)
        embed_submit = submit_group is not None and len(groups.get(submit_group, [])) > 1
        if embed_submit:
            submit.group = submit_group
            groups[submit_group].append(submit)

        for name, members in groups.items():
            if len(members) == 1:
                members[0].group = None
                form.elements.append(members[0])
            else:
                form.elements.append(WidgetGroup(name=name, label=name, elements=members))

        if not embed_submit:
            form.elements.append(submit)

        form.defaults = defaults
        return form
