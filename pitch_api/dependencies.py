"""FastAPI dependencies shared by the routers."""

from typing import Callable, Generator, Optional, TypeVar

from fastapi import Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from pitch_api.auth.models import User
from pitch_api.auth.security import read_access_token
from pitch_api.config import Settings, get_settings
from pitch_api.db.database import SessionLocal
from pitch_core.completion import CompletionClient
from pitch_core.pipeline import RubricPipeline

SESSION_COOKIE = "access_token"

BodyT = TypeVar("BodyT", bound=BaseModel)

bearer_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """One session per request, closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_request_token(request: Request, bearer: Optional[str] = Depends(bearer_scheme)) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    return bearer or request.cookies.get(SESSION_COOKIE)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _lookup_user(token: Optional[str], db: Session) -> Optional[User]:
    if not token:
        return None
    user_id = read_access_token(token)
    if user_id is None:
        return None
    return db.get(User, user_id)


async def get_current_user(
    token: Optional[str] = Depends(get_request_token),
    db: Session = Depends(get_db),
) -> User:
    """
    The signed-in account.

    Raises:
        HTTPException: 401 without a valid token, 403 for a disabled account
    """
    user = _lookup_user(token, db)
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is disabled")
    return user


async def get_optional_user(
    token: Optional[str] = Depends(get_request_token),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """The signed-in account, or None for anonymous and disabled callers."""
    user = _lookup_user(token, db)
    if user is None or not user.is_active:
        return None
    return user


def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    """Completion client for the configured model."""
    return CompletionClient(settings.completion_config())


def get_pipeline(client: CompletionClient = Depends(get_completion_client)) -> RubricPipeline:
    return RubricPipeline(client)


def authenticated_body(model: type[BodyT]) -> Callable:
    """
    Dependency that parses the JSON body into ``model`` once the caller is signed in.

    A declared body parameter is decoded before any dependency runs, so an
    anonymous caller with a malformed body would get 400 instead of 401.
    Decoding and model errors are raised as ``RequestValidationError``.
    """

    async def parse(request: Request, _: User = Depends(get_current_user)) -> BodyT:
        try:
            payload = await request.json()
        except ValueError:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
            ) from None
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(
                [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
            ) from e

    return parse
