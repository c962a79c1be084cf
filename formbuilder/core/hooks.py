from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formbuilder.core.builder import FormBuilder
    from formbuilder.schemas.widgets import FormSpec


class FormRecordMixin:
    """
    Mix into a mapped class to tune the generated form.

    Every hook has a no-op default, so the builder calls them unconditionally.
    All class attributes are optional; empty means "auto-generate".

    Example:
        class Article(FormRecordMixin, Base):
            field_labels = {"title": "Headline"}
            date_fields = ["legacy_date"]           # string column holding a date
            pre_def_order = ["id", "title", "body"]  # must list every field
            pre_def_groups = {"title": "main", "body": "main", "__submit__": "main"}
    """

    # explicit key used for the insert/update decision
    form_primary_key = None

    pre_def_elements = {}
    field_labels = {}
    date_fields = ()
    text_fields = ()
    radio_fields = ()
    static_fields = ()
    fields_required = ()
    fields_to_freeze = ()
    select_add_empty = ()
    select_display_fields = {}
    field_attributes = {}
    pre_def_order = None
    pre_def_groups = {}

    # when this class is the target of a relation select
    select_display_field = None
    select_order_field = None
    date_element_format = None

    def pre_generate_form(self, builder: FormBuilder) -> None:
        pass

    def get_form(self, builder: FormBuilder) -> FormSpec | None:
        """Return a complete FormSpec to bypass auto-generation."""
        return None

    def post_generate_form(self, form: FormSpec) -> FormSpec:
        return form

    def pre_process(self, values: dict[str, Any]) -> None:
        pass

    def post_process(self, values: dict[str, Any]) -> None:
        pass

    def validate(self) -> Any:
        """Return a falsy value when valid, otherwise the errors (e.g. {field: message})."""
        return None


class _NoHooks(FormRecordMixin):
    pass


NO_HOOKS = _NoHooks()


def hooks_for(record) -> FormRecordMixin:
    """Records that don't use the mixin get the no-op hooks."""
    return record if isinstance(record, FormRecordMixin) else NO_HOOKS
