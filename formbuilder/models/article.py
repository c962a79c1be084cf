from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import sqlalchemy as sa

from formbuilder.core.hooks import FormRecordMixin
from formbuilder.db.base import Base


class Article(FormRecordMixin, Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    body: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    published_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    # 0 = draft, 1 = live, 2 = withdrawn
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, server_default=sa.func.now()
    )

    category = relationship("Category", lazy="selectin")

    field_labels = {"category_id": "Category", "published_on": "Publication date"}
    fields_required = ["title"]
    fields_to_freeze = ["created_at"]
    select_add_empty = ["category_id"]

    def validate(self):
        errors = {}
        if not (self.title or "").strip():
            errors["title"] = "Title must not be empty"
        if self.status not in (0, 1, 2):
            errors["status"] = "Unknown status"
        if self.status == 1 and self.published_on is None:
            errors["published_on"] = "Live articles need a publication date"
        return errors
