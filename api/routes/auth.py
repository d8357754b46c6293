from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import get_db, transaction
from app.errors import AuthenticationError, ValidationFailedError
from app.logger import get_logger
from app.models import User
from schemas.auth import UserCreate, UserLogin, Token
from auth.security import hash_password, verify_password
from auth.oauth2 import get_current_user
from auth.jwt_handler import create_access_token

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _auth_response(user: User) -> dict:
    return {
        "status": "success",
        "token": create_access_token({"sub": user.id}),
        "data": {"user": user.to_dict()},
    }


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not verify_password(password, str(user.password)):
        raise AuthenticationError("Incorrect email or password")
    return user


@router.post("/register", status_code=201)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    existing_user = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if existing_user:
        raise ValidationFailedError("Email already in use")

    with transaction(db):
        user = User(
            name=payload.name,
            email=payload.email,
            password=hash_password(payload.password),
        )
        db.add(user)

    logger.info(f"Registered user {user.id}")
    return _auth_response(user)


@router.post("/login")
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    return _auth_response(user)


@router.post("/token", response_model=Token)
def login_for_access_token(
    form: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """OAuth2 password flow for Swagger UI; the username field carries the email."""
    user = _authenticate(db, form.username, form.password)
    return Token(access_token=create_access_token({"sub": user.id}))


@router.get("/me")
def read_current_user(user: User = Depends(get_current_user)):
    return {"status": "success", "data": {"user": user.to_dict()}}


@router.get("/users")
def list_users(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """All users except the caller, for picking team members and assignees."""
    users = db.execute(
        select(User).where(User.id != user.id).order_by(User.name.asc())
    ).scalars().all()
    return {"status": "success", "data": {"users": [u.to_dict() for u in users]}}
