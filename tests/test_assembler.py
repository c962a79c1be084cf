from datetime import date

from formbuilder.core.assembler import FormAssembler, ordered_fields
from formbuilder.core.builder import FormBuilder
from formbuilder.core.config import FormBuilderConfig
from formbuilder.core.introspection import introspect
from formbuilder.models.article import Article
from formbuilder.schemas.widgets import WidgetGroup, WidgetKind
from tests.helpers import create_article, create_category

ARTICLE_FIELDS = [
    "id",
    "title",
    "summary",
    "body",
    "category_id",
    "published_on",
    "status",
    "is_featured",
    "created_at",
]


def names(form):
    return [el.name for el in form.elements]


def build(db, record, **options):
    return FormBuilder.create(record, db, config=FormBuilderConfig(), **options)


def test_new_article_form(db_session):
    form = build(db_session, Article()).get_form()

    assert form.name == "Article"
    assert form.header == "articles"
    assert names(form) == ARTICLE_FIELDS + ["__submit__"]

    assert form.widget("id").kind == WidgetKind.HIDDEN
    assert form.widget("summary").kind == WidgetKind.TEXTAREA
    assert form.widget("published_on").kind == WidgetKind.DATE_GROUP
    assert form.widget("published_on").label == "Publication date"
    assert form.widget("is_featured").kind == WidgetKind.CHECKBOX
    assert form.widget("created_at").frozen is True
    assert form.submit_widgets[0].label == "Submit"
    assert all(v is None for v in form.defaults.values())


def test_status_is_text_with_numeric_rule(db_session):
    form = build(db_session, Article()).get_form()
    status = form.widget("status")
    assert status.kind == WidgetKind.TEXT
    assert [r.kind for r in form.rules["status"]] == ["numeric"]
    assert [r.kind for r in form.rules["title"]] == ["required"]
    assert "summary" not in form.rules


def test_category_select_lists_ordered_options(db_session):
    b = create_category(db_session, "Beta", position=2)
    a = create_category(db_session, "Alpha", position=1)

    form = build(db_session, Article()).get_form()
    select = form.widget("category_id")
    assert select.kind == WidgetKind.SELECT
    assert select.options == [("", ""), (a.id, "Alpha"), (b.id, "Beta")]


def test_defaults_come_from_the_record(db_session):
    c = create_category(db_session, "News")
    article = create_article(
        db_session,
        "Hello",
        category=c,
        status=1,
        published_on=date(2024, 1, 15),
        summary="two\nlines",
    )

    form = build(db_session, article).get_form()
    assert form.defaults["title"] == "Hello"
    assert form.defaults["category_id"] == c.id
    assert form.defaults["published_on"] == {"day": 15, "month": 1, "year": 2024}
    assert form.defaults["id"] == article.id


def test_header_and_name_options(db_session):
    form = build(db_session, Article(), add_form_header=False, form_name="edit").get_form()
    assert form.header is None
    assert form.name == "edit"

    form = build(db_session, Article(), form_header_text="New article").get_form()
    assert form.header == "New article"


def test_explicit_order_must_be_a_permutation(db_session):
    schema = introspect(Article())
    reordered = list(reversed(ARTICLE_FIELDS))
    assert [f.name for f in ordered_fields(schema, reordered)] == reordered

    assert [f.name for f in ordered_fields(schema, ARTICLE_FIELDS[:-1])] == ARTICLE_FIELDS
    assert [f.name for f in ordered_fields(schema, ARTICLE_FIELDS + ["title"])] == ARTICLE_FIELDS
    assert [f.name for f in ordered_fields(schema, None)] == ARTICLE_FIELDS


def test_incomplete_order_falls_back_to_natural_order(db_session):
    fb = build(db_session, Article())
    fb.overrides.field_order = ["title", "id"]
    assert names(fb.get_form()) == ARTICLE_FIELDS + ["__submit__"]


def test_groups_collect_members_and_submit(db_session):
    fb = build(db_session, Article())
    fb.overrides.groups = {"title": "main", "summary": "main", "__submit__": "main"}
    form = fb.get_form()

    group = form.group("main")
    assert isinstance(group, WidgetGroup)
    assert [m.name for m in group.elements] == ["title", "summary", "__submit__"]
    assert all(m.group == "main" for m in group.elements)
    # grouped widgets come after the ungrouped ones, no second submit
    assert names(form)[-1] == "main"
    assert len(form.submit_widgets) == 1


def test_single_member_group_degrades_to_plain_widget(db_session):
    fb = build(db_session, Article())
    fb.overrides.groups = {"title": "solo", "__submit__": "solo"}
    form = fb.get_form()

    assert form.group("solo") is None
    assert form.widget("title").group is None
    assert names(form)[-2:] == ["title", "__submit__"]


def test_generation_is_repeatable(db_session):
    create_category(db_session, "News")
    article = create_article(db_session, "Hello")
    fb = build(db_session, article)
    assert fb.get_form().model_dump() == fb.get_form().model_dump()


def test_assembler_without_resolver():
    form = FormAssembler(FormBuilderConfig()).assemble(Article())
    assert form.widget("category_id").options == [("", "")]


def test_remove_drops_widget_rules_and_default(db_session):
    fb = build(db_session, Article())
    fb.overrides.groups = {"title": "main", "summary": "main"}
    form = fb.get_form()

    form.remove("status")
    form.remove("title")
    assert form.widget("status") is None
    assert "status" not in form.rules
    assert "status" not in form.defaults
    assert [m.name for m in form.group("main").elements] == ["summary"]
