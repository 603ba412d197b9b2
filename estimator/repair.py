"""
Repair of stored projects that break current invariants.

The one known corruption: a work item typed as the custom work type whose
customWorkTypeName is blank. Records written before that rule existed (or by a
path that skipped validation) can carry it. The fix is to give the item a
placeholder name.

Repairs run in two phases, plan (pure, on the stored JSON) then persist, and
the persist phase never raises: its outcome is returned and logged. Saves skip
the invariant enforcer so a record that fails some unrelated check can still
be healed.
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from . import models
from .schemas import PaymentMethod, PaymentStatus
from .taxonomy import CUSTOM_WORK_TYPE

logger = logging.getLogger(__name__)

UNNAMED_CUSTOM_WORK = "Unnamed Custom Work"
LEGACY_DEPOSIT_NOTE = "Initial Deposit (migrated from old system)"
LEGACY_DEPOSIT_KEYS = ("deposit", "depositMethod", "depositDate")


@dataclass
class RepairPlan:
    categories: list
    repaired_paths: list[str] = field(default_factory=list)

    @property
    def needed(self) -> bool:
        return bool(self.repaired_paths)


@dataclass
class RepairOutcome:
    project_id: Optional[int]
    repaired_paths: list[str] = field(default_factory=list)
    saved: bool = False
    error: Optional[str] = None

    @property
    def needed(self) -> bool:
        return bool(self.repaired_paths)


def is_unnamed_custom_item(item) -> bool:
    if not isinstance(item, dict) or item.get("type") != CUSTOM_WORK_TYPE:
        return False
    name = item.get("customWorkTypeName")
    return not (isinstance(name, str) and name.strip())


def plan_repair(categories) -> RepairPlan:
    """Repaired copy of a stored category list. The input is not modified."""
    repaired = copy.deepcopy(categories) if isinstance(categories, list) else []
    paths = []
    for ci, category in enumerate(repaired):
        if not isinstance(category, dict):
            continue
        work_items = category.get("workItems")
        if not isinstance(work_items, list):
            continue
        for ii, item in enumerate(work_items):
            if is_unnamed_custom_item(item):
                item["customWorkTypeName"] = UNNAMED_CUSTOM_WORK
                if item.get("kind") != "custom":
                    item["kind"] = "custom"
                paths.append(f"categories.{ci}.workItems.{ii}.customWorkTypeName")
    return RepairPlan(categories=repaired, repaired_paths=paths)


def persist_repair(db: Session, project: models.Project, plan: RepairPlan) -> RepairOutcome:
    """Write a planned repair. Failures are logged and reported, never raised."""
    project_id = project.id
    outcome = RepairOutcome(project_id=project_id, repaired_paths=list(plan.repaired_paths))
    if not plan.needed:
        return outcome

    try:
        project.categories = copy.deepcopy(plan.categories)
        db.commit()
    except Exception as e:
        db.rollback()
        outcome.error = str(e)
        logger.exception("Failed to save repair for project %s", project_id)
        return outcome

    outcome.saved = True
    logger.info(
        "Repaired project %s: %d unnamed custom work item(s)", project_id, len(plan.repaired_paths),
    )
    return outcome


def repair_on_read(db: Session, project: models.Project) -> tuple[list, RepairOutcome]:
    """
    Heal a project as it is fetched.

    Returns the categories to show the caller (repaired whether or not the save
    went through) and the outcome of the save. A failed save leaves the stored
    record corrupt, so the next fetch tries again.
    """
    plan = plan_repair(project.categories)
    if not plan.needed:
        return project.categories, RepairOutcome(project_id=project.id)

    logger.warning(
        "Project %s has %d unnamed custom work item(s) — repairing", project.id, len(plan.repaired_paths),
    )
    outcome = persist_repair(db, project, plan)
    return plan.categories, outcome


def repair_all_projects(db: Session) -> dict:
    """
    Scan every stored project and repair each one that needs it.

    A failed save is logged and the scan moves on.
    """
    logger.info("Starting project validation and repair...")
    repaired_ids = []
    failed_ids = []

    project_ids = [row.id for row in db.query(models.Project.id).order_by(models.Project.id).all()]
    for project_id in project_ids:
        project = db.query(models.Project).filter(models.Project.id == project_id).first()
        if project is None:
            continue
        plan = plan_repair(project.categories)
        if not plan.needed:
            continue
        outcome = persist_repair(db, project, plan)
        if outcome.saved:
            repaired_ids.append(project_id)
        else:
            failed_ids.append(project_id)

    logger.info("Repair complete. Fixed %d project(s), %d failed.", len(repaired_ids), len(failed_ids))
    return {"repaired": len(repaired_ids), "projectIds": repaired_ids, "failed": failed_ids}


def _legacy_deposit_payment(settings: dict, customer_info: dict, amount: float) -> dict:
    date = settings.get("depositDate") or (customer_info or {}).get("startDate")
    if not date:
        date = datetime.utcnow().isoformat()
    return {
        "date": date,
        "amount": amount,
        "method": PaymentMethod.DEPOSIT.value,
        "note": LEGACY_DEPOSIT_NOTE,
        "isPaid": True,
        "status": PaymentStatus.PAID.value,
    }


def migrate_legacy_deposits(db: Session) -> dict:
    """
    Move the old single-deposit settings fields into the payments list.

    Projects that already have a Deposit payment are left alone.
    """
    migrated = 0
    project_ids = [row.id for row in db.query(models.Project.id).order_by(models.Project.id).all()]
    for project_id in project_ids:
        project = db.query(models.Project).filter(models.Project.id == project_id).first()
        if project is None:
            continue
        settings = dict(project.settings or {})
        try:
            deposit = float(settings.get("deposit") or 0)
        except (TypeError, ValueError):
            deposit = 0.0
        if deposit <= 0:
            continue

        payments = list(settings.get("payments") or [])
        if any(isinstance(p, dict) and p.get("method") == PaymentMethod.DEPOSIT.value for p in payments):
            continue

        payments.append(_legacy_deposit_payment(settings, project.customer_info, deposit))
        settings["payments"] = payments
        for key in LEGACY_DEPOSIT_KEYS:
            settings.pop(key, None)

        try:
            project.settings = settings
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to migrate deposit for project %s", project_id)
            continue
        migrated += 1

    if migrated == 0:
        logger.info("No projects with legacy deposits found to migrate.")
    else:
        logger.info("Successfully migrated %d project(s).", migrated)
    return {"migrated": migrated}
