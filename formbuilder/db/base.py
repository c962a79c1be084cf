from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

# Import models so the registry knows every form-capable table
from formbuilder.models import *  # noqa
