"""
Category / work-item sanitizer — first stop for a raw category tree.

Rules:
- A category missing its key or name fails the whole request.
- A work item that is not an object, has a blank type, or is a custom work
  type with no custom name is incomplete: it is dropped, not an error.
- Surviving items are rebuilt with defaults and stamped with their
  category's key.
- Empty categories are kept (the user may fill them later), but a project
  with zero surviving work items fails.
"""

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from .errors import ProjectValidationError, Violation, violations_from_pydantic
from .measurements import normalize_measurement_type, to_number
from .schemas import DEFAULT_WORK_ITEM_NAME, Category, CustomWorkItem, StandardWorkItem
from .taxonomy import CUSTOM_WORK_TYPE

logger = logging.getLogger(__name__)

SURFACE_DIMENSIONS = ("width", "height", "sqft", "linearFt", "units", "length")


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_incomplete_work_item(item) -> bool:
    """True for items that should never reach storage."""
    if not isinstance(item, Mapping):
        return True
    work_type = _text(item.get("type"))
    if not work_type:
        return True
    if work_type == CUSTOM_WORK_TYPE and not _text(item.get("customWorkTypeName")):
        return True
    return False


def _sanitize_surface(surface: Mapping, item_measurement_type: str) -> dict:
    raw_type = surface.get("measurementType")
    clean = {
        "name": _text(surface.get("name")),
        "measurementType": (
            normalize_measurement_type(raw_type) if raw_type else item_measurement_type
        ),
        "manualSqft": bool(surface.get("manualSqft", False)),
    }
    for field in SURFACE_DIMENSIONS:
        clean[field] = to_number(surface.get(field))
    return clean


def _sanitize_work_item(item: Mapping, category_key: str) -> dict:
    work_type = _text(item.get("type"))
    measurement_type = normalize_measurement_type(item.get("measurementType"))
    surfaces = item.get("surfaces")
    if not isinstance(surfaces, list):
        surfaces = []

    return {
        "kind": "custom" if work_type == CUSTOM_WORK_TYPE else "standard",
        "type": work_type,
        "customWorkTypeName": _text(item.get("customWorkTypeName")),
        "name": _text(item.get("name")) or DEFAULT_WORK_ITEM_NAME,
        "subtype": _text(item.get("subtype")),
        "description": _text(item.get("description")),
        "notes": _text(item.get("notes")),
        "materialCost": to_number(item.get("materialCost")),
        "laborCost": to_number(item.get("laborCost")),
        "measurementType": measurement_type,
        "surfaces": [
            _sanitize_surface(s, measurement_type) for s in surfaces if isinstance(s, Mapping)
        ],
        "categoryKey": category_key,
    }


def sanitize_categories(raw_categories) -> list[Category]:
    """
    Filter and rebuild a raw category list into validated Category models.

    Raises ProjectValidationError for a keyless/nameless category, for an
    empty project, or for out-of-range values on a surviving item.
    """
    if not isinstance(raw_categories, list):
        raw_categories = []

    if not raw_categories:
        raise ProjectValidationError.single(
            "categories", "Project must have at least one category.",
        )

    categories: list[Category] = []
    violations: list[Violation] = []
    surviving = 0
    dropped = 0

    for ci, raw in enumerate(raw_categories):
        if not isinstance(raw, Mapping) or not _text(raw.get("key")) or not _text(raw.get("name")):
            raise ProjectValidationError.single(
                f"categories.{ci}",
                f"Category at index {ci} is missing a key or name.",
            )

        key = _text(raw["key"])
        raw_items = raw.get("workItems")
        if not isinstance(raw_items, list):
            raw_items = []

        items = []
        for ii, raw_item in enumerate(raw_items):
            if is_incomplete_work_item(raw_item):
                dropped += 1
                logger.debug("Dropping incomplete work item %d in category %r", ii, key)
                continue

            clean = _sanitize_work_item(raw_item, key)
            model_cls = CustomWorkItem if clean["kind"] == "custom" else StandardWorkItem
            try:
                items.append(model_cls.model_validate(clean))
            except ValidationError as e:
                violations.extend(
                    violations_from_pydantic(e, f"categories.{ci}.workItems.{ii}")
                )
                continue

        surviving += len(items)
        categories.append(Category(key=key, name=_text(raw["name"]), work_items=items))

    if violations:
        raise ProjectValidationError(violations)

    if surviving == 0:
        raise ProjectValidationError.single(
            "categories", "Project must contain at least one valid work item.",
        )

    if dropped:
        logger.info("Sanitizer dropped %d incomplete work item(s)", dropped)
    return categories
