from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.db import get_db
from app.errors import AuthenticationError
from app.models import User
from auth.jwt_handler import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """Resolve the bearer token to an existing user, or fail with 401."""
    if not token:
        raise AuthenticationError("You are not logged in. Please log in to get access.")

    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid token. Please log in again.")

    user = db.get(User, payload["sub"])
    if user is None:
        raise AuthenticationError("The user belonging to this token no longer exists.")
    return user


def get_current_user_id(user: User = Depends(get_current_user)) -> str:
    return user.id
