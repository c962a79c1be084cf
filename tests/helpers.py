from datetime import date

from sqlalchemy.orm import Session

from formbuilder.models.article import Article
from formbuilder.models.category import Category


def create_category(db: Session, name: str, position: int = 0) -> Category:
    c = Category(name=name, position=position)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def create_article(
    db: Session,
    title: str = "Hello",
    *,
    category: Category | None = None,
    status: int = 0,
    published_on: date | None = None,
    summary: str | None = None,
    body: str | None = None,
) -> Article:
    a = Article(
        title=title,
        category_id=(category.id if category else None),
        status=status,
        published_on=published_on,
        summary=summary,
        body=body,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    return a
