from formbuilder.models.category import Category
from formbuilder.models.article import Article

__all__ = [ "Category", "Article" ]
