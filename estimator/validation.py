"""
Invariant enforcer — the pass every project record goes through before a write.

Pure and idempotent: given the same record and taxonomy it returns the same
normalized record, and running it on its own output changes nothing.

Normalizes:
- categoryKey on every work item, re-copied from the owning category
- measurement types on items and surfaces, mapped to canonical values
- customerInfo.street, rebuilt from its components when they are present

Validates:
- every category key is a taxonomy key or a custom category
- every work item type is allowed for its category
- every custom work item carries a custom name
"""

import logging
from typing import Optional

from .errors import ProjectValidationError, Violation
from .measurements import normalize_measurement_type
from .schemas import Category, CustomerInfo, CustomWorkItem, ProjectRecord
from .taxonomy import Taxonomy

logger = logging.getLogger(__name__)


def build_street_address(customer: CustomerInfo) -> Optional[str]:
    """'123 N Main St' from the address components, or None when they are absent."""
    if not (customer.address_number or customer.street_name):
        return None
    parts = [customer.address_number, customer.direction, customer.street_name, customer.street_type]
    return " ".join(str(p).strip() for p in parts if p and str(p).strip())


def normalize_customer(customer: CustomerInfo) -> CustomerInfo:
    street = build_street_address(customer)
    if street is None or street == customer.street:
        return customer
    return customer.model_copy(update={"street": street})


def normalize_categories(categories: list[Category]) -> list[Category]:
    """Re-derive categoryKey and canonical measurement types across the tree."""
    normalized = []
    for category in categories:
        items = []
        for item in category.work_items:
            item_type = normalize_measurement_type(item.measurement_type)
            surfaces = [
                surface.model_copy(update={
                    "measurement_type": (
                        normalize_measurement_type(surface.measurement_type)
                        if surface.measurement_type else item_type
                    ),
                })
                for surface in item.surfaces
            ]
            items.append(item.model_copy(update={
                "category_key": category.key,
                "measurement_type": item_type,
                "surfaces": surfaces,
            }))
        normalized.append(category.model_copy(update={"work_items": items}))
    return normalized


def collect_violations(categories: list[Category], taxonomy: Taxonomy) -> list[Violation]:
    """Every key/type violation in a (normalized) category tree."""
    violations = []
    for ci, category in enumerate(categories):
        if not taxonomy.is_valid_category_key(category.key):
            violations.append(Violation(
                path=f"categories.{ci}.key",
                message=f'"{category.key}" is not a valid category key.',
            ))

        for ii, item in enumerate(category.work_items):
            path = f"categories.{ci}.workItems.{ii}"
            if isinstance(item, CustomWorkItem) and not (item.custom_work_type_name or "").strip():
                violations.append(Violation(
                    path=f"{path}.customWorkTypeName",
                    message="Custom work type name is required when using custom work types.",
                ))
                continue

            category_key = item.category_key or category.key
            if not taxonomy.is_valid_work_type(category_key, item.type):
                violations.append(Violation(
                    path=f"{path}.type",
                    message=f'"{item.type}" is not a valid work type for category "{category_key}".',
                ))
    return violations


def enforce_invariants(record: ProjectRecord, taxonomy: Taxonomy) -> ProjectRecord:
    """
    Normalize and validate a record before it is persisted.

    Returns the normalized record, or raises ProjectValidationError listing
    every violation found.
    """
    categories = normalize_categories(record.categories)

    violations = []
    if not categories:
        violations.append(Violation(path="categories", message="Project must have at least one category."))
    violations.extend(collect_violations(categories, taxonomy))

    if violations:
        logger.warning(
            "Project failed validation with %d violation(s): %s",
            len(violations), ", ".join(v.path for v in violations),
        )
        raise ProjectValidationError(violations)

    return record.model_copy(update={
        "customer_info": normalize_customer(record.customer_info),
        "categories": categories,
    })
