import logging
import os

from sqlalchemy.orm import Session

from app.modules.grocery.constants import DEFAULT_CATEGORY_NAMES
from app.modules.grocery.models import Category
from app.services.schedules import NowUtc

logger = logging.getLogger("app.bootstrap")


def _env_truthy(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def ShouldSeedCategories() -> bool:
    return _env_truthy("SEED_DEFAULT_CATEGORIES", default=True)


def EnsureDefaultCategories(db: Session) -> list[Category]:
    existing = {
        entry.Name.lower() for entry in db.query(Category).all()
    }
    missing = [name for name in DEFAULT_CATEGORY_NAMES if name.lower() not in existing]
    if not missing:
        logger.info("default categories already present")
        return []

    records = [Category(Name=name, CreatedAt=NowUtc()) for name in missing]
    db.add_all(records)
    db.commit()
    for record in records:
        db.refresh(record)
    logger.info("seeded default categories: %s", ", ".join(missing))
    return records
