"""
Public entry point.

    article = db.get(Article, article_id) or Article()
    fb = FormBuilder.create(article, db, validate_on_process=True)
    form = fb.get_form()           # FormSpec, hand it to a renderer
    ...
    result = fb.process_form(posted_values)
    if not result:
        errors = fb.get_validation_errors()
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from formbuilder.core.assembler import FormAssembler
from formbuilder.core.binder import SubmissionBinder, SubmissionResult, validation_failed
from formbuilder.core.config import FormBuilderConfig, settings
from formbuilder.core.hooks import hooks_for
from formbuilder.core.inference import default_label
from formbuilder.core.introspection import collect_overrides, get_mapper, relation_for
from formbuilder.core.options import OptionListResolver
from formbuilder.core.persistence import SessionPersistence
from formbuilder.schemas.widgets import FormSpec

logger = logging.getLogger(__name__)


class FormBuilder:
    def __init__(self, record, db: Session, config: FormBuilderConfig):
        mapper = get_mapper(record)
        self.record = record
        self.db = db
        self.config = config
        self.registry = mapper.registry
        # per-builder copy, so hooks can add predefined widgets without touching the class
        self.overrides = collect_overrides(record)
        self.options = OptionListResolver(db, config, self.registry)
        self._binder = SubmissionBinder(config, SessionPersistence(db))
        self._validation_errors: Any = None

    @classmethod
    def create(cls, record, db: Session, config: FormBuilderConfig | None = None, **options) -> "FormBuilder":
        """
        Raises NotARecordError if `record` is not a mapped instance and
        ValueError for unknown options.
        """
        base = config or FormBuilderConfig.from_settings(settings)
        return cls(record, db, base.with_options(**options) if options else base)

    def add_predefined_widget(self, name: str, widget: Any) -> None:
        """Use `widget` for field `name` instead of an inferred one (pre-generation hook helper)."""
        self.overrides.predefined_widgets[name] = widget

    def get_form(self) -> FormSpec:
        hooks = hooks_for(self.record)
        hooks.pre_generate_form(self)

        form = hooks.get_form(self)
        if form is None:
            form = FormAssembler(self.config, self.options).assemble(self.record, self.overrides)
        else:
            logger.debug("%s supplied its own form", type(self.record).__name__)

        altered = hooks.post_generate_form(form)
        return form if altered is None else altered

    def process_form(self, values: Mapping[str, Any]) -> SubmissionResult:
        result = self._binder.process(self.record, values)
        self._validation_errors = self._binder.validation_errors
        self.record = result.record
        return result

    def validate_data(self) -> Any:
        result = hooks_for(self.record).validate()
        self._validation_errors = result if validation_failed(result) else None
        return self._validation_errors

    def get_validation_errors(self) -> Any:
        return self._validation_errors

    def get_field_label(self, name: str) -> str:
        return self.overrides.field_labels.get(name) or default_label(name)

    def get_select_options(self, field: str, display_field: str | None = None) -> list[tuple[Any, Any]]:
        """Options for a field that references another table; [] if it doesn't."""
        column = get_mapper(self.record).columns.get(field)
        if column is None or not column.foreign_keys:
            logger.debug("Field '%s' has no relation, no options", field)
            return []
        relation = relation_for(column)
        relation.display_field = self.overrides.select_display_fields.get(field)
        return self.options.resolve(relation, display_field)
