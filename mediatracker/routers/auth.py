from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..config import Settings
from ..db import get_session, storage_guard
from ..errors import ValidationError
from ..models import User as UserModel

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")

router = APIRouter()


class User(BaseModel):
    """The authenticated identity handed to every protected route."""

    id: int
    email: str
    username: str


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class Profile(BaseModel):
    id: int
    email: str
    username: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    favorite_movies: Optional[str] = None
    favorite_shows: Optional[str] = None
    favorite_books: Optional[str] = None
    favorite_genres: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: Dict[str, Any]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode: Dict[str, Any] = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def token_for(user: UserModel, settings: Settings) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email, "username": user.username}, settings=settings
    )


def to_profile(user: UserModel) -> Profile:
    assert user.id is not None
    return Profile(
        id=user.id,
        email=user.email,
        username=user.username,
        profile_picture=user.profile_picture,
        bio=user.bio,
        favorite_movies=user.favorite_movies,
        favorite_shows=user.favorite_shows,
        favorite_books=user.favorite_books,
        favorite_genres=user.favorite_genres,
    )


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub.isdigit():
            raise credentials_exception
        user_id = int(sub)
    except JWTError:
        raise credentials_exception
    # Tokens outlive deleted accounts; re-check the user exists
    db_user = session.get(UserModel, user_id)
    if db_user is None:
        raise credentials_exception
    assert db_user.id is not None
    return User(id=db_user.id, email=db_user.email, username=db_user.username)


@router.post("/register", response_model=AuthResponse)
def register(
    req: RegisterRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    if not req.email or not req.password or not req.username:
        raise ValidationError("All fields are required")
    existing = session.exec(
        select(UserModel).where((UserModel.email == req.email) | (UserModel.username == req.username))
    ).first()
    if existing:
        raise ValidationError("Email or username already exists")
    user = UserModel(
        email=req.email,
        username=req.username,
        hashed_password=pwd_context.hash(req.password),
    )
    with storage_guard(session, "creating user"):
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            session.rollback()
            raise ValidationError("Email or username already exists")
        session.refresh(user)
    assert user.id is not None
    logger.info("user_registered", user_id=user.id, username=user.username)
    return AuthResponse(
        token=token_for(user, settings),
        user={"id": user.id, "email": user.email, "username": user.username},
    )


@router.post("/login", response_model=AuthResponse)
def login(
    req: LoginRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    db_user = None
    if req.email:
        db_user = session.exec(select(UserModel).where(UserModel.email == req.email)).first()
    if db_user is None or not req.password or not verify_password(req.password, db_user.hashed_password):
        raise ValidationError("Invalid credentials")
    return AuthResponse(token=token_for(db_user, settings), user=to_profile(db_user).model_dump())
