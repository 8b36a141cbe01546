"""Rubric API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pitch_api.auth.models import User
from pitch_api.dependencies import get_current_user, get_db, get_optional_user
from pitch_api.rubrics.schemas import RubricCreate, RubricResponse, RubricUpdate
from pitch_api.rubrics.service import RubricService, validate_payload

router = APIRouter(prefix="/rubrics", tags=["Rubrics"])


@router.get("", response_model=list[RubricResponse])
async def list_rubrics(
    scope: str = Query("templates", description="templates or mine"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """List templates, or the current user's own rubrics."""
    service = RubricService(db)

    if scope == "templates":
        return service.list_templates()

    if scope == "mine":
        if current_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return service.list_for_user(current_user)

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="scope must be 'templates' or 'mine'",
    )


@router.post("", response_model=RubricResponse, status_code=status.HTTP_201_CREATED)
async def create_rubric(
    data: RubricCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Store a rubric; legacy criteria shapes are translated first."""
    draft = validate_payload(data.model_dump(exclude={"source"}))
    return RubricService(db).create(current_user, draft, source=data.source)


@router.get("/{rubric_id}", response_model=RubricResponse)
async def get_rubric(
    rubric_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Get a template or one of the current user's rubrics."""
    rubric = RubricService(db).get_visible(rubric_id, current_user)
    if not rubric:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rubric not found")
    return rubric


@router.put("/{rubric_id}", response_model=RubricResponse)
async def update_rubric(
    rubric_id: int,
    data: RubricUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update one of the current user's rubrics."""
    service = RubricService(db)
    rubric = service.get_owned(rubric_id, current_user)
    if not rubric:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rubric not found")
    return service.update(rubric, data.model_dump())


@router.delete("/{rubric_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rubric(
    rubric_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete one of the current user's rubrics."""
    service = RubricService(db)
    rubric = service.get_owned(rubric_id, current_user)
    if not rubric:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rubric not found")
    service.delete(rubric)
