"""Account routes.

Browser clients are given the access token as an HTTP-only ``access_token``
cookie; API clients use the token from the login response as a bearer header.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from pitch_api.auth.models import User
from pitch_api.auth.schemas import AccountResponse, PasswordChangeRequest, RegisterRequest, TokenResponse
from pitch_api.auth.service import AccountService
from pitch_api.config import Settings, get_settings
from pitch_api.dependencies import SESSION_COOKIE, get_current_user, get_db

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _attach_session(response: Response, session: TokenResponse, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.access_token,
        max_age=session.expires_in,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        path="/",
    )


def _drop_session(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE, path="/")


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account."""
    user = AccountService(db).register(data)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    return user


@router.post("/login", response_model=TokenResponse)
async def login(
    response: Response,
    form: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Exchange email (as ``username``) and password for an access token."""
    service = AccountService(db)
    user = service.authenticate(form.username, form.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is disabled")

    session = service.start_session(user)
    _attach_session(response, session, settings)
    return session


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    _drop_session(response)


@router.get("/me", response_model=AccountResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the password; the current one must be given."""
    if not AccountService(db).change_password(current_user, data.current_password, data.new_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def close_account(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the account and every rubric it owns."""
    AccountService(db).close(current_user)
    _drop_session(response)
