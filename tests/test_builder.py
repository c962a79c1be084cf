from datetime import date, datetime

import pytest

from formbuilder.core.builder import FormBuilder
from formbuilder.core.config import FormBuilderConfig
from formbuilder.core.errors import NotARecordError
from formbuilder.models.article import Article
from formbuilder.schemas.widgets import WidgetKind
from tests.helpers import create_category
from tests.records import Gadget, Memo, Note, ScratchBase

ARTICLE_FIELDS = ["id", "title", "summary", "body", "category_id", "published_on", "status", "is_featured", "created_at"]


@pytest.fixture()
def scratch_tables(db_session):
    bind = db_session.get_bind()
    ScratchBase.metadata.create_all(bind=bind)
    Note.calls.clear()
    yield
    ScratchBase.metadata.drop_all(bind=bind)


def create(db, record, **options):
    return FormBuilder.create(record, db, config=FormBuilderConfig(), **options)


def test_create_rejects_non_records(db_session):
    with pytest.raises(NotARecordError):
        create(db_session, {"title": "x"})


def test_create_rejects_unknown_options(db_session):
    with pytest.raises(ValueError):
        create(db_session, Article(), colour="blue")


def test_options_do_not_touch_the_base_config(db_session):
    config = FormBuilderConfig()
    fb = FormBuilder.create(Article(), db_session, config=config, validate_on_process=True)
    assert fb.config.validate_on_process is True
    assert config.validate_on_process is False


def test_create_defaults_to_settings(db_session):
    fb = FormBuilder.create(Article(), db_session)
    assert fb.config.submit_name == "__submit__"


def test_pre_and_post_generation_hooks(db_session, scratch_tables):
    form = create(db_session, Note()).get_form()

    assert form.header == "Notes"
    assert form.widget("text").kind == WidgetKind.TEXTAREA
    assert form.widget("text").label == "Note"
    assert form.widget("mood").kind == WidgetKind.RADIO_GROUP
    # the predefined widget only lives on that builder
    assert Note.pre_def_elements == {}


def test_custom_form_hook_bypasses_generation(db_session, scratch_tables):
    form = create(db_session, Memo()).get_form()
    assert form.name == "hand-made"
    assert form.elements == []
    assert form.header == "Memo"


def test_records_without_mixin_get_default_hooks(db_session, scratch_tables):
    form = create(db_session, Gadget()).get_form()
    assert form.widget("code").kind == WidgetKind.HIDDEN
    assert form.widget("legacy_date").kind == WidgetKind.DATE_GROUP
    assert form.widget("size").options == [("small", "small"), ("large", "large")]
    assert form.widget("opens_at").kind == WidgetKind.TIME_GROUP
    assert form.widget("notes").kind == WidgetKind.TEXTAREA


def test_process_hooks_run_around_persistence(db_session, scratch_tables):
    fb = create(db_session, Note())
    result = fb.process_form({"text": "remember", "mood": "ok"})

    assert result.operation == "insert"
    assert Note.calls == [("pre", {"text": "remember", "mood": "ok"}), ("post", fb.record.id)]
    assert fb.record.id is not None


def test_explicit_primary_key_decides_update(db_session, scratch_tables):
    result = create(db_session, Memo()).process_form({"memo_key": "1", "line_no": "1", "body": "x"})
    assert result.operation == "update"


def test_validate_data(db_session):
    fb = create(db_session, Article(title="", status=1))
    errors = fb.validate_data()
    assert set(errors) == {"title", "published_on"}
    assert fb.get_validation_errors() == errors

    ok = create(db_session, Article(title="Hello", status=0))
    assert ok.validate_data() is None
    assert ok.get_validation_errors() is None


def test_process_form_keeps_validation_errors(db_session):
    fb = create(db_session, Article(), validate_on_process=True)
    result = fb.process_form({"title": "Hello", "status": "7"})
    assert not result
    assert fb.get_validation_errors() == {"status": "Unknown status"}


def test_field_labels(db_session):
    fb = create(db_session, Article())
    assert fb.get_field_label("category_id") == "Category"
    assert fb.get_field_label("title") == "Title"


def test_select_options_helper(db_session):
    c = create_category(db_session, "News")
    fb = create(db_session, Article())
    assert fb.get_select_options("category_id") == [(c.id, "News")]
    assert fb.get_select_options("category_id", display_field="position") == [(c.id, 0)]
    assert fb.get_select_options("title") == []
    assert fb.get_select_options("missing") == []


def test_form_defaults_round_trip(db_session):
    c = create_category(db_session, "News")
    article = Article(title="Hello", category_id=c.id, status=1, published_on=date(2024, 2, 29), summary="a\nb")
    db_session.add(article)
    db_session.commit()
    db_session.refresh(article)
    before = {k: getattr(article, k) for k in ARTICLE_FIELDS}

    fb = create(db_session, article)
    posted = dict(fb.get_form().defaults)
    result = fb.process_form(posted)

    assert result.operation == "update"
    assert {k: getattr(fb.record, k) for k in ARTICLE_FIELDS} == before


def test_sub_second_datetime_round_trip(db_session):
    stamp = datetime(2024, 1, 2, 3, 4, 5, 678901)
    article = Article(title="Hello", status=0, created_at=stamp)
    db_session.add(article)
    db_session.commit()
    db_session.refresh(article)

    fb = create(db_session, article)
    defaults = fb.get_form().defaults
    assert defaults["created_at"]["microsecond"] == 678901

    fb.process_form(dict(defaults))
    db_session.expire_all()
    assert db_session.get(Article, article.id).created_at == stamp


def test_non_string_field_attributes(db_session, scratch_tables):
    form = create(db_session, Gadget()).get_form()
    assert form.widget("notes").attributes == {"rows": 5, "class": "wide"}


def test_unreadable_date_string_survives_a_round_trip(db_session, scratch_tables):
    gadget = Gadget(code="g1", legacy_date="15.01.2024")
    db_session.add(gadget)
    db_session.commit()

    fb = create(db_session, gadget)
    defaults = fb.get_form().defaults
    assert defaults["legacy_date"] == "15.01.2024"

    fb.process_form(dict(defaults))
    db_session.expire_all()
    assert db_session.get(Gadget, "g1").legacy_date == "15.01.2024"
