from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from formbuilder.core.hooks import FormRecordMixin
from formbuilder.db.base import Base


class Category(FormRecordMixin, Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)

    # sort key for option lists; ties fall back to insertion order
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # how categories show up in other records' selects
    select_display_field = "name"
    select_order_field = "position"

    field_labels = {"name": "Category name"}
