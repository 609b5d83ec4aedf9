from __future__ import annotations
from datetime import datetime
from typing import List, Optional

import structlog
from sqlmodel import Session, select

from ..clock import utcnow
from ..db import storage_guard
from ..errors import NotFoundError, ValidationError
from ..models import MediaItem, MediaStatus, MediaType
from ..schemas import MediaCreate, MediaUpdate
from . import completion, stats

logger = structlog.get_logger()

SORT_FIELDS = ("date_added", "release_date", "rating", "title")
DEFAULT_SORT = "date_added"


def _validated_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError("Title is required")
    return title


def _validated_type(value: object) -> MediaType:
    try:
        return MediaType(value)
    except ValueError:
        raise ValidationError(f"Invalid media type: {value!r}")


def get_item(session: Session, owner_id: int, item_id: int) -> MediaItem:
    rec = session.exec(
        select(MediaItem).where((MediaItem.id == item_id) & (MediaItem.user_id == owner_id))
    ).first()
    if rec is None:
        # Same answer for missing and foreign items
        raise NotFoundError("Media item not found")
    return rec


def add_item(session: Session, owner_id: int, data: MediaCreate) -> MediaItem:
    rec = MediaItem(
        user_id=owner_id,
        title=_validated_title(data.title),
        type=_validated_type(data.type),
        status=data.status,
        rating=data.rating,
        review=data.review,
        release_date=data.release_date,
        total_pages=data.total_pages,
        pages_read=0,
        is_finished=False,
        date_completed=None,
    )
    with storage_guard(session, "adding media item", user_id=owner_id):
        session.add(rec)
        session.commit()
        session.refresh(rec)
    logger.info("media_item_added", user_id=owner_id, item_id=rec.id, type=rec.type.value)
    return rec


def list_items(
    session: Session,
    owner_id: int,
    status: Optional[MediaStatus] = None,
    media_type: Optional[MediaType] = None,
    sort_by: Optional[str] = DEFAULT_SORT,
    sort_order: Optional[str] = "desc",
) -> List[MediaItem]:
    """Return the owner's items, filtered and sorted.

    An unknown ``sort_by`` quietly falls back to ``date_added``; ``sort_order``
    is ``asc`` (any case) or descending.
    """
    query = select(MediaItem).where(MediaItem.user_id == owner_id)
    if status is not None:
        query = query.where(MediaItem.status == status)
    if media_type is not None:
        query = query.where(MediaItem.type == media_type)

    field = sort_by if sort_by in SORT_FIELDS else DEFAULT_SORT
    column = getattr(MediaItem, field)
    ascending = (sort_order or "").lower() == "asc"
    if ascending:
        query = query.order_by(column.asc(), MediaItem.id.asc())  # type: ignore[union-attr]
    else:
        query = query.order_by(column.desc(), MediaItem.id.desc())  # type: ignore[union-attr]
    return list(session.exec(query).all())


def update_item(
    session: Session,
    owner_id: int,
    item_id: int,
    data: MediaUpdate,
    now: Optional[datetime] = None,
    year: Optional[int] = None,
) -> MediaItem:
    rec = get_item(session, owner_id, item_id)
    assert rec.id is not None
    now = now or utcnow()
    previous_type = rec.type

    title = _validated_title(data.title)
    media_type = _validated_type(data.type)

    with storage_guard(session, "updating media item", user_id=owner_id, item_id=item_id):
        completed = False
        stamp = completion.next_date_completed(rec.is_finished, rec.date_completed, data.is_finished, now)
        if stamp is not None and rec.date_completed is None:
            completed = completion.claim_completion(session, owner_id, rec.id, stamp)
            if completed:
                stats.record_completion(session, owner_id, previous_type, year)

        rec.title = title
        rec.type = media_type
        rec.status = data.status
        rec.rating = data.rating
        rec.review = data.review
        rec.release_date = data.release_date
        rec.pages_read = data.pages_read
        rec.is_finished = data.is_finished
        # date_completed is only ever written by claim_completion
        session.add(rec)
        session.commit()
        session.refresh(rec)

    logger.info("media_item_updated", user_id=owner_id, item_id=item_id, is_finished=rec.is_finished)
    if completed:
        logger.info("media_item_completed", user_id=owner_id, item_id=item_id, type=previous_type.value)
    return rec


def delete_item(session: Session, owner_id: int, item_id: int) -> None:
    """Delete the owner's item; a missing or foreign id is a no-op."""
    rec = session.exec(
        select(MediaItem).where((MediaItem.id == item_id) & (MediaItem.user_id == owner_id))
    ).first()
    if rec is None:
        return
    with storage_guard(session, "deleting media item", user_id=owner_id, item_id=item_id):
        session.delete(rec)
        session.commit()
    logger.info("media_item_deleted", user_id=owner_id, item_id=item_id)
