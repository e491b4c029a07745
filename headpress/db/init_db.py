# headpress/db/init_db.py
import logging
from typing import Dict

from sqlalchemy.orm import Session

from headpress.core.config import Settings, settings
from headpress.db.models_registry import Category, LinkCategory, Option
from headpress.models.taxonomy import DEFAULT_CATEGORY_ID
from headpress.models.link import DEFAULT_LINK_CATEGORY_ID

logger = logging.getLogger(__name__)


def default_options(config: Settings = settings) -> Dict[str, str]:
    """Option rows seeded on a fresh install; site name and description come from configuration."""
    return {
        "site_title": config.SITE_NAME,
        "site_description": config.SITE_DESCRIPTION,
        "posts_per_page": "10",
        "default_comment_status": "open",
        "date_format": "Y-m-d",
        "time_format": "H:i:s",
        "timezone": "UTC",
    }


def init_db(db: Session, config: Settings = settings) -> None:
    """
    Seeds the rows every installation needs. Safe to run repeatedly.
    """
    # On an empty table the first row receives id 1.
    if db.get(Category, DEFAULT_CATEGORY_ID) is None and db.query(Category).first() is None:
        db.add(Category(
            name="Uncategorized",
            slug="uncategorized",
            description="Default category",
        ))
        logger.info("Default category created")

    if db.get(LinkCategory, DEFAULT_LINK_CATEGORY_ID) is None and db.query(LinkCategory).first() is None:
        db.add(LinkCategory(
            name="Friends",
            slug="friends",
            description="Friendly links",
        ))
        logger.info("Default link category created")

    existing = {name for (name,) in db.query(Option.option_name).all()}
    for name, value in default_options(config).items():
        if name not in existing:
            db.add(Option(option_name=name, option_value=value, autoload="yes"))

    db.commit()
