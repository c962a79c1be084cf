from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, registry as Registry

from formbuilder.core.config import FormBuilderConfig
from formbuilder.core.introspection import get_mapper, main_primary_key, resolve_record_class
from formbuilder.schemas.fields import Relation

logger = logging.getLogger(__name__)


class OptionListResolver:
    """
    Builds (key, label) option lists for fields that reference another table.

    Display field precedence: explicit argument > `select_display_field` on the
    target class > config default > the target's primary key.
    Sort field precedence: `select_order_field` on the target class > config
    default > the display field.
    """

    def __init__(self, db: Session, config: FormBuilderConfig, registry: Registry):
        self.db = db
        self.config = config
        self.registry = registry

    def display_field_for(self, target_cls: type, explicit: str | None = None) -> str | None:
        if explicit:
            return explicit
        return (
            getattr(target_cls, "select_display_field", None)
            or self.config.select_display_field
            or main_primary_key(get_mapper(target_cls))
        )

    def order_field_for(self, target_cls: type, display_field: str | None) -> str | None:
        return (
            getattr(target_cls, "select_order_field", None)
            or self.config.select_order_field
            or display_field
        )

    def resolve(self, relation: Relation, display_field: str | None = None) -> list[tuple[Any, Any]]:
        target_cls = resolve_record_class(self.registry, relation.target_table)
        if target_cls is None:
            logger.warning("Relation target '%s' is not a mapped record class", relation.target_table)
            return []

        pk = main_primary_key(get_mapper(target_cls))
        display = self.display_field_for(target_cls, display_field or relation.display_field)
        order = self.order_field_for(target_cls, display)

        columns = {p.key for p in get_mapper(target_cls).column_attrs}
        missing = [f for f in (pk, display, order) if f not in columns]
        if missing:
            logger.warning(
                "Cannot build options from %s: unknown field(s) %s",
                relation.target_table,
                missing,
            )
            return []

        try:
            rows = (
                self.db.query(target_cls)
                .order_by(getattr(target_cls, order).asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("Option query on %s failed", relation.target_table)
            return []

        return [(getattr(r, pk), getattr(r, display)) for r in rows]
