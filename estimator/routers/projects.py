"""
Project endpoints — create, list, show, update, delete.

The request body is taken as raw JSON and handed to the project pipeline,
which owns all validation; failures come back through the ProjectValidationError
handler in main.py as {"error", "details", "paths"}.
"""

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .. import models
from .. import project_service
from ..auth import get_current_user
from ..database import get_db
from ..errors import ProjectNotFoundError
from ..taxonomy import Taxonomy, get_taxonomy

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("/", status_code=201)
def create_project(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
    taxonomy: Taxonomy = Depends(get_taxonomy),
):
    return project_service.create_project(db, current_user, payload, taxonomy)


@router.get("/")
def list_projects(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """The caller's projects, most recently updated first."""
    return project_service.list_projects(db, current_user)


@router.get("/{project_id}")
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        return project_service.get_project(db, current_user, project_id)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found.")


@router.put("/{project_id}")
def update_project(
    project_id: int,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
    taxonomy: Taxonomy = Depends(get_taxonomy),
):
    try:
        return project_service.update_project(db, current_user, project_id, payload, taxonomy)
    except ProjectNotFoundError:
        raise HTTPException(
            status_code=404,
            detail="Project not found or you do not have permission to edit it.",
        )


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        project_service.delete_project(db, current_user, project_id)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found.")
    return JSONResponse(status_code=200, content={"message": "Project deleted successfully."})
