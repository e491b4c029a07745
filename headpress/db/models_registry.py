# headpress/db/models_registry.py
# Imports every model so Base.metadata is complete.
# Used by alembic/env.py, init_db and the test suite.

from headpress.db.base import Base
from headpress.models.user import User
from headpress.models.content import Post, PostMeta, post_categories, post_tags
from headpress.models.taxonomy import Category, Tag
from headpress.models.comment import Comment
from headpress.models.media import Media
from headpress.models.link import Link, LinkCategory
from headpress.models.moment import Moment
from headpress.models.option import Option

__all__ = [
    "Base", "User", "Post", "PostMeta", "post_categories", "post_tags",
    "Category", "Tag", "Comment", "Media", "Link", "LinkCategory",
    "Moment", "Option",
]
