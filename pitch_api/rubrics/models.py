"""Rubric database models."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from pitch_api.db.database import Base
from pitch_core.models import RubricDraft


class Rubric(Base):
    """A rubric template (no owner) or a user's own rubric."""

    __tablename__ = "rubrics"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    is_template = Column(Boolean, default=False, index=True)
    source = Column(String(20), default="manual")

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    target_duration_seconds = Column(Float, nullable=True)
    max_duration_seconds = Column(Float, nullable=True)
    criteria = Column(JSON, nullable=False)  # list of canonical criterion dicts
    context_summary = Column(Text, nullable=True)
    guiding_questions = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="rubrics")

    def to_draft(self) -> RubricDraft:
        """Stored columns as a RubricDraft."""
        return RubricDraft(
            title=self.title,
            description=self.description,
            target_duration_seconds=self.target_duration_seconds,
            max_duration_seconds=self.max_duration_seconds,
            criteria=self.criteria,
            context_summary=self.context_summary,
            guiding_questions=self.guiding_questions or [],
        )

    def apply_draft(self, draft: RubricDraft) -> None:
        """Overwrite the stored columns with a validated draft."""
        self.title = draft.title
        self.description = draft.description
        self.target_duration_seconds = draft.target_duration_seconds
        self.max_duration_seconds = draft.max_duration_seconds
        self.criteria = [c.model_dump() for c in draft.criteria]
        self.context_summary = draft.context_summary
        self.guiding_questions = list(draft.guiding_questions)
