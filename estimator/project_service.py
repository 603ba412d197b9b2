"""
Project write/read pipeline.

Write: raw payload → sanitize categories → price → assemble record →
enforce invariants → persist. Totals and payment details are always
recomputed here; any values the caller sent under those names are ignored.

Read: fetch by id and owner → opportunistic repair → response.
"""

import logging
import math
from collections.abc import Mapping
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import models
from .errors import ProjectNotFoundError, ProjectValidationError, Violation, violations_from_pydantic
from .pricing_engine import PricingEngine
from .repair import repair_on_read
from .sanitizer import sanitize_categories
from .schemas import CustomerInfo, ProjectRecord, ProjectSettings
from .taxonomy import Taxonomy
from .validation import enforce_invariants

logger = logging.getLogger(__name__)

pricing_engine = PricingEngine()


def _parse_block(model_cls, data, prefix: str, violations: list[Violation]):
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        violations.append(Violation(path=prefix, message=f"{prefix} must be an object."))
        return None
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        violations.extend(violations_from_pydantic(e, prefix))
        return None


def build_project_record(owner_id: int, payload, taxonomy: Taxonomy,
                         engine: Optional[PricingEngine] = None) -> ProjectRecord:
    """
    Turn a raw create/update payload into a validated record ready to persist.

    Raises ProjectValidationError with every problem found.
    """
    engine = engine or pricing_engine
    if not isinstance(payload, Mapping):
        raise ProjectValidationError.single("", "Request body must be an object.")

    violations: list[Violation] = []

    categories = None
    try:
        categories = sanitize_categories(payload.get("categories"))
    except ProjectValidationError as e:
        violations.extend(e.violations)

    customer_info = _parse_block(CustomerInfo, payload.get("customerInfo"), "customerInfo", violations)
    settings = _parse_block(ProjectSettings, payload.get("settings"), "settings", violations)

    if violations:
        raise ProjectValidationError(violations)

    totals = engine.calculate_totals(categories, settings)
    if not math.isfinite(totals.total):
        raise ProjectValidationError.single("totals", "Project totals are too large to compute.")
    payment_details = engine.aggregate_payments(settings.payments, totals.total)

    record = ProjectRecord(
        user_id=owner_id,
        customer_info=customer_info,
        categories=categories,
        settings=settings,
        totals=totals,
        payment_details=payment_details,
    )
    return enforce_invariants(record, taxonomy)


def _apply_record(project: models.Project, record: ProjectRecord) -> None:
    for column, value in record.to_storage().items():
        setattr(project, column, value)
    project.customer_last_name = record.customer_info.last_name


def _get_owned(db: Session, user: models.User, project_id: int) -> models.Project:
    project = db.query(models.Project).filter(
        models.Project.id == project_id,
        models.Project.user_id == user.id,
    ).first()
    if not project:
        raise ProjectNotFoundError(project_id)
    return project


def project_to_dict(project: models.Project) -> dict:
    return {
        "id": project.id,
        "userId": project.user_id,
        "customerInfo": project.customer_info,
        "categories": project.categories,
        "settings": project.settings,
        "totals": project.totals,
        "paymentDetails": project.payment_details,
        "createdAt": project.created_at.isoformat() if project.created_at else None,
        "updatedAt": project.updated_at.isoformat() if project.updated_at else None,
    }


def create_project(db: Session, user: models.User, payload, taxonomy: Taxonomy) -> dict:
    record = build_project_record(user.id, payload, taxonomy)
    project = models.Project(user_id=user.id)
    _apply_record(project, record)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Created project %s for user %s", project.id, user.id)
    return project_to_dict(project)


def update_project(db: Session, user: models.User, project_id: int, payload,
                   taxonomy: Taxonomy) -> dict:
    """Replace a project's customer, categories and settings wholesale."""
    project = _get_owned(db, user, project_id)
    record = build_project_record(user.id, payload, taxonomy)
    _apply_record(project, record)
    db.commit()
    db.refresh(project)
    logger.info("Updated project %s for user %s", project.id, user.id)
    return project_to_dict(project)


def list_projects(db: Session, user: models.User) -> list[dict]:
    projects = db.query(models.Project).filter(
        models.Project.user_id == user.id,
    ).order_by(models.Project.updated_at.desc(), models.Project.id.desc()).all()
    return [project_to_dict(p) for p in projects]


def get_project(db: Session, user: models.User, project_id: int) -> dict:
    """Fetch one project, healing it on the way out if it is corrupt."""
    project = _get_owned(db, user, project_id)
    categories, outcome = repair_on_read(db, project)
    if outcome.saved:
        db.refresh(project)
    data = project_to_dict(project)

    if outcome.needed and not outcome.saved:
        data["categories"] = categories
        logger.warning(
            "Returning repaired project %s without saving it: %s", project_id, outcome.error,
        )
    return data


def delete_project(db: Session, user: models.User, project_id: int) -> None:
    project = _get_owned(db, user, project_id)
    db.delete(project)
    db.commit()
    logger.info("Deleted project %s for user %s", project_id, user.id)
