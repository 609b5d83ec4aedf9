"""Completion tracking for media items.

An item "completes" the first time its ``is_finished`` flag goes from false
to true. That moment stamps ``date_completed`` and bumps the owner's annual
counter. Both happen at most once per item: the stamp is never cleared, so a
later unfinish/refinish cycle is not a new completion.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from ..models import MediaItem


def is_completion_transition(
    was_finished: bool, date_completed: Optional[datetime], now_finished: bool
) -> bool:
    return bool(now_finished) and not was_finished and date_completed is None


def next_date_completed(
    was_finished: bool,
    date_completed: Optional[datetime],
    now_finished: bool,
    now: datetime,
) -> Optional[datetime]:
    if is_completion_transition(was_finished, date_completed, now_finished):
        return now
    return date_completed


def claim_completion(session: Session, owner_id: int, item_id: int, now: datetime) -> bool:
    """Atomically stamp ``date_completed`` if nobody has yet.

    Two updaters that both loaded the item as unfinished race here; the
    conditional UPDATE lets exactly one of them see a changed row.
    """
    stmt = (
        update(MediaItem)
        .where(
            (MediaItem.id == item_id)  # type: ignore[arg-type]
            & (MediaItem.user_id == owner_id)
            & (MediaItem.date_completed.is_(None))  # type: ignore[union-attr]
        )
        .values(date_completed=now, is_finished=True)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1
