import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from formbuilder.main import app
from formbuilder.db.base import Base
from formbuilder.db.session import get_db
from formbuilder.api.forms import get_form_config
from formbuilder.core.config import FormBuilderConfig

# one shared in-memory database for the whole run
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture()
def db_session():
    """
    Fresh schema per test.

    Application code commits freely, so instead of rolling back a savepoint
    the tables are dropped and recreated around each test.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def override_dependencies(db_session):
    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_form_config] = lambda: FormBuilderConfig(validate_on_process=True)
    yield
    app.dependency_overrides.clear()
