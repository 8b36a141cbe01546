"""Rubric persistence service layer."""

from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from pitch_api.auth.models import User
from pitch_api.rubrics.models import Rubric
from pitch_core.drafts import normalize_rubric_payload, validate_rubric_draft
from pitch_core.logging_config import get_logger
from pitch_core.models import RubricDraft
from pitch_core.schema import Rejected

logger = get_logger("api.rubrics")


def validate_payload(payload: Any) -> RubricDraft:
    """
    Normalise and validate a draft-like payload.

    Raises:
        HTTPException: 400 with the rejection reason
    """
    result = validate_rubric_draft(normalize_rubric_payload(payload))
    if isinstance(result, Rejected):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid rubric: {result.reason}",
        )
    return result


class RubricService:
    """Service for stored rubrics and templates."""

    def __init__(self, db: Session):
        self.db = db

    def list_templates(self) -> list[Rubric]:
        """All templates, oldest first."""
        return (
            self.db.query(Rubric)
            .filter(Rubric.is_template.is_(True))
            .order_by(Rubric.id)
            .all()
        )

    def list_for_user(self, user: User) -> list[Rubric]:
        """A user's own rubrics, newest first."""
        return (
            self.db.query(Rubric)
            .filter(Rubric.user_id == user.id, Rubric.is_template.is_(False))
            .order_by(Rubric.created_at.desc(), Rubric.id.desc())
            .all()
        )

    def default_template(self) -> Optional[Rubric]:
        """The first template, used when analysis is requested without a rubric."""
        templates = self.list_templates()
        return templates[0] if templates else None

    def get_visible(self, rubric_id: int, user: Optional[User]) -> Optional[Rubric]:
        """A template, or a rubric owned by ``user``."""
        rubric = self.db.query(Rubric).filter(Rubric.id == rubric_id).first()
        if rubric is None:
            return None
        if rubric.is_template:
            return rubric
        if user is not None and rubric.user_id == user.id:
            return rubric
        return None

    def get_owned(self, rubric_id: int, user: User) -> Optional[Rubric]:
        """A non-template rubric owned by ``user``."""
        return (
            self.db.query(Rubric)
            .filter(
                Rubric.id == rubric_id,
                Rubric.user_id == user.id,
                Rubric.is_template.is_(False),
            )
            .first()
        )

    def create(self, user: User, draft: RubricDraft, source: str = "manual") -> Rubric:
        """Store a validated draft for ``user``."""
        rubric = Rubric(user_id=user.id, is_template=False, source=source)
        rubric.apply_draft(draft)
        self.db.add(rubric)
        self.db.commit()
        self.db.refresh(rubric)
        logger.info("Created rubric %s (%s) for user %s", rubric.id, source, user.id)
        return rubric

    def update(self, rubric: Rubric, changes: dict[str, Any]) -> Rubric:
        """Merge ``changes`` into the stored draft, re-validate and save."""
        merged = rubric.to_draft().model_dump()
        merged.update(normalize_rubric_payload(changes))
        rubric.apply_draft(validate_payload(merged))
        self.db.commit()
        self.db.refresh(rubric)
        return rubric

    def delete(self, rubric: Rubric) -> None:
        """Delete a rubric."""
        self.db.delete(rubric)
        self.db.commit()
