import os
import secrets
import time
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlmodel import Session

from .auth import Profile, get_current_user, get_settings, to_profile, User
from ..config import Settings
from ..db import get_session, storage_guard
from ..errors import NotFoundError, ValidationError
from ..models import User as UserModel
from ..schemas import Message

logger = structlog.get_logger()

router = APIRouter()

ALLOWED_IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
CHUNK_SIZE = 64 * 1024


class ProfileUpdate(BaseModel):
    bio: Optional[str] = None
    favorite_movies: Optional[str] = None
    favorite_shows: Optional[str] = None
    favorite_books: Optional[str] = None
    favorite_genres: Optional[str] = None


def _load_user(session: Session, user_id: int) -> UserModel:
    db_user = session.get(UserModel, user_id)
    if db_user is None:
        raise NotFoundError("User not found")
    return db_user


@router.get("", response_model=Profile)
def get_profile(current_user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return to_profile(_load_user(session, current_user.id))


@router.put("", response_model=Message)
def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    db_user = _load_user(session, current_user.id)
    for key, value in update.model_dump().items():
        setattr(db_user, key, value)
    with storage_guard(session, "updating profile", user_id=current_user.id):
        session.add(db_user)
        session.commit()
    return Message(message="Profile updated successfully")


def _save_upload(upload: UploadFile, directory: str, max_bytes: int) -> str:
    """Copy an upload into ``directory`` and return the stored file name.

    The destination is removed if the copy fails or exceeds ``max_bytes``.
    """
    ext = os.path.splitext(upload.filename or "")[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS or (upload.content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Only image files are allowed!")

    os.makedirs(directory, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
    path = os.path.join(directory, filename)
    written = 0
    try:
        with open(path, "wb") as out:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise ValidationError("File too large")
                out.write(chunk)
    except BaseException:
        if os.path.exists(path):
            os.remove(path)
        raise
    return filename


@router.post("/picture")
def upload_picture(
    picture: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    try:
        filename = _save_upload(picture, settings.upload_dir, settings.max_upload_bytes)
    finally:
        picture.file.close()

    picture_url = f"/uploads/{filename}"
    try:
        db_user = _load_user(session, current_user.id)
        db_user.profile_picture = picture_url
        with storage_guard(session, "updating profile picture", user_id=current_user.id):
            session.add(db_user)
            session.commit()
    except Exception:
        os.remove(os.path.join(settings.upload_dir, filename))
        raise
    logger.info("profile_picture_uploaded", user_id=current_user.id, path=picture_url)
    return {"profile_picture": picture_url}
