from __future__ import annotations
from enum import Enum
from typing import List, Optional, Type, TypeVar

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .auth import get_current_user, get_settings, User
from ..clock import current_year
from ..config import Settings
from ..db import get_session
from ..errors import ValidationError
from ..models import MediaStatus, MediaType
from ..schemas import Media, MediaCreate, MediaCreated, MediaUpdate, Message
from ..services import media as media_service

router = APIRouter()

E = TypeVar("E", bound=Enum)


def _parse_filter(value: Optional[str], enum_cls: Type[E], name: str) -> Optional[E]:
    # An empty query value means "no filter"
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}: {value!r}")


@router.post("", response_model=MediaCreated)
def add_item(
    item: MediaCreate, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    rec = media_service.add_item(session, current_user.id, item)
    assert rec.id is not None
    return MediaCreated(id=rec.id, message="Media item added successfully")


@router.get("", response_model=List[Media])
def list_items(
    status: Optional[str] = None,
    type: Optional[str] = None,
    sort_by: str = "date_added",
    sort_order: str = "DESC",
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    items = media_service.list_items(
        session,
        current_user.id,
        status=_parse_filter(status, MediaStatus, "status"),
        media_type=_parse_filter(type, MediaType, "type"),
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return [Media.model_validate(i) for i in items]


@router.get("/{item_id}", response_model=Media)
def get_item(
    item_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    return Media.model_validate(media_service.get_item(session, current_user.id, item_id))


@router.put("/{item_id}", response_model=Message)
def update_item(
    item_id: int,
    update: MediaUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    media_service.update_item(
        session, current_user.id, item_id, update, year=current_year(settings.use_utc_day)
    )
    return Message(message="Media item updated successfully")


@router.delete("/{item_id}", response_model=Message)
def delete_item(
    item_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    media_service.delete_item(session, current_user.id, item_id)
    return Message(message="Media item deleted successfully")
