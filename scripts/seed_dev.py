# seed_dev.py
from datetime import date

from sqlalchemy.orm import Session

from formbuilder.db.base import Base
from formbuilder.db.session import SessionLocal, engine
from formbuilder.models.article import Article
from formbuilder.models.category import Category


# ---------- helpers ----------

def get_or_create_category(db: Session, name: str, position: int) -> Category:
    c = db.query(Category).filter(Category.name == name).one_or_none()
    if c:
        # keep the ordering up to date in dev
        if c.position != position:
            c.position = position
            db.commit()
            db.refresh(c)
        return c

    c = Category(name=name, position=position)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def get_or_create_article(db: Session, title: str, **values) -> Article:
    a = db.query(Article).filter(Article.title == title).one_or_none()
    if a:
        return a

    a = Article(title=title, **values)
    db.add(a)
    db.commit()
    db.refresh(a)
    return a


def main():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        news = get_or_create_category(db, "News", position=1)
        howto = get_or_create_category(db, "How-to", position=2)
        archive = get_or_create_category(db, "Archive", position=9)

        live = get_or_create_article(
            db,
            "Hello world",
            summary="First post.\nSpans two lines.",
            category_id=news.id,
            published_on=date(2024, 1, 15),
            status=1,
            is_featured=True,
        )
        draft = get_or_create_article(
            db,
            "Writing forms by hand",
            body="Short draft body",
            category_id=howto.id,
            status=0,
        )

        print("\n=== DEV SEED COMPLETE ===")
        print("Categories:")
        for c in (news, howto, archive):
            print(f"  {c.id}: {c.name} (position={c.position})")

        print("\nArticles:")
        print(f"  live:  {live.id} {live.title!r}")
        print(f"  draft: {draft.id} {draft.title!r}")

        print("\nNext API steps:")
        print("  GET  /forms")
        print("  GET  /forms/articles")
        print(f"  GET  /forms/articles/{draft.id}")
        print(f"  POST /forms/articles  {{\"id\": \"{draft.id}\", \"status\": \"2\"}}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
