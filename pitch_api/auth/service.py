"""Account lifecycle: registration, sign-in, password change and deletion."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from pitch_api.auth.models import User
from pitch_api.auth.schemas import RegisterRequest, TokenResponse
from pitch_api.auth.security import hash_password, issue_access_token, password_matches
from pitch_core.logging_config import get_logger

logger = get_logger("api.auth")


class AccountService:
    """Account operations over one database session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def register(self, data: RegisterRequest) -> Optional[User]:
        """Create an account, or return None when the email is taken."""
        if self.find_by_email(data.email):
            return None

        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            display_name=data.display_name,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered account %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """The account for these credentials, with its last sign-in time updated."""
        user = self.find_by_email(email)
        if user is None or not password_matches(password, user.password_hash):
            return None

        user.last_login_at = datetime.utcnow()
        self.db.commit()
        return user

    @staticmethod
    def start_session(user: User) -> TokenResponse:
        token, lifetime = issue_access_token(user.id)
        return TokenResponse(access_token=token, expires_in=lifetime)

    def change_password(self, user: User, current_password: str, new_password: str) -> bool:
        """Replace the password; False when ``current_password`` is wrong."""
        if not password_matches(current_password, user.password_hash):
            return False
        user.password_hash = hash_password(new_password)
        self.db.commit()
        return True

    def close(self, user: User) -> None:
        """Delete the account and, through the cascade, its rubrics."""
        user_id, owned = user.id, user.rubric_count
        self.db.delete(user)
        self.db.commit()
        logger.info("Closed account %s (%d rubrics removed)", user_id, owned)
