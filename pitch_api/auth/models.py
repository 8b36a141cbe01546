"""Account table."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from pitch_api.db.database import Base


class User(Base):
    """A coach account. Deleting it deletes every rubric it owns."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    rubrics = relationship("Rubric", back_populates="owner", cascade="all, delete-orphan")

    @property
    def rubric_count(self) -> int:
        return len(self.rubrics)
