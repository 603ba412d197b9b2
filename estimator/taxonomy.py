"""
Work-type taxonomy — which work-item types each category allows.

The table itself is data (data/taxonomy.json); adding a permitted type is an
edit to that file. A Taxonomy instance is passed into validation rather than
read from a global, so tests can run against a synthetic table.

Two escape hatches sit outside the table:
- the custom work type marker is valid in every category
- a category whose key starts with the custom-category prefix allows any type
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from .config import settings

logger = logging.getLogger(__name__)

CUSTOM_CATEGORY_PREFIX = "custom_"
CUSTOM_WORK_TYPE = "custom-work-type"


class Taxonomy:
    """Category key → allowed work-item types."""

    def __init__(self, categories: dict[str, list[str]], version: str = "custom",
                 custom_category_prefix: str = CUSTOM_CATEGORY_PREFIX,
                 custom_work_type: str = CUSTOM_WORK_TYPE):
        self.version = version
        self.custom_category_prefix = custom_category_prefix
        self.custom_work_type = custom_work_type
        self._types = {key: frozenset(types) for key, types in categories.items()}

    @classmethod
    def from_file(cls, path) -> "Taxonomy":
        """Load a taxonomy JSON file: {"version", "categories": {key: [types]}}."""
        filepath = Path(path)
        if not filepath.exists():
            raise FileNotFoundError(f"No taxonomy file found at: {filepath}")

        with open(filepath) as f:
            data = json.load(f)

        return cls(
            categories=data.get("categories", {}),
            version=str(data.get("version", "unversioned")),
            custom_category_prefix=data.get("customCategoryPrefix", CUSTOM_CATEGORY_PREFIX),
            custom_work_type=data.get("customWorkType", CUSTOM_WORK_TYPE),
        )

    @property
    def category_keys(self) -> list[str]:
        return sorted(self._types)

    def allowed_types(self, category_key: str) -> Optional[frozenset]:
        return self._types.get(category_key)

    def is_custom_category(self, category_key) -> bool:
        return bool(category_key) and str(category_key).startswith(self.custom_category_prefix)

    def is_custom_work_type(self, work_type) -> bool:
        return work_type == self.custom_work_type

    def is_valid_category_key(self, category_key) -> bool:
        if not category_key:
            return False
        return self.is_custom_category(category_key) or category_key in self._types

    def is_valid_work_type(self, category_key, work_type) -> bool:
        """
        Custom work type → valid. Custom category → valid.
        Otherwise the type must be listed for the category; an unknown
        category key is never valid.
        """
        if not category_key or not work_type:
            logger.warning(
                "Work type check skipped: category_key=%r, work_type=%r", category_key, work_type,
            )
            return False

        if self.is_custom_work_type(work_type):
            return True

        if self.is_custom_category(category_key):
            return True

        allowed = self._types.get(category_key)
        if allowed is None:
            logger.warning("Category %r not found in taxonomy %s", category_key, self.version)
            return False

        if work_type not in allowed:
            logger.warning("Invalid work type %r for category %r", work_type, category_key)
            return False
        return True


@lru_cache(maxsize=None)
def load_taxonomy(path: str) -> Taxonomy:
    """Load and cache a taxonomy file."""
    taxonomy = Taxonomy.from_file(path)
    logger.info("Loaded work-type taxonomy %s (%d categories)", taxonomy.version, len(taxonomy.category_keys))
    return taxonomy


def get_taxonomy() -> Taxonomy:
    """FastAPI dependency — the configured taxonomy."""
    return load_taxonomy(settings.TAXONOMY_PATH)
