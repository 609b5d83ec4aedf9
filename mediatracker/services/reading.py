from __future__ import annotations

from datetime import date
from typing import Optional

import structlog
from sqlmodel import Session, select

from ..clock import today as local_today
from ..db import insert_for, storage_guard
from ..models import DailyReading

logger = structlog.get_logger()


def add_daily_pages(session: Session, owner_id: int, pages: int, today: Optional[date] = None) -> None:
    """Add ``pages`` to the owner's counter for ``today``.

    Any integer is accepted, negative values included, and is applied as a
    delta. The insert-or-add happens in one statement so concurrent
    submissions for the same day are all counted.
    """
    day = today or local_today()
    with storage_guard(session, "updating daily reading", user_id=owner_id):
        stmt = insert_for(session, DailyReading).values(user_id=owner_id, reading_date=day, pages_read=pages)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "reading_date"],
            set_={"pages_read": DailyReading.pages_read + stmt.excluded.pages_read},
        )
        session.execute(stmt)
        session.commit()
    logger.info("daily_pages_added", user_id=owner_id, date=day.isoformat(), pages=pages)


def get_daily_pages(session: Session, owner_id: int, today: Optional[date] = None) -> int:
    day = today or local_today()
    row = session.exec(
        select(DailyReading).where((DailyReading.user_id == owner_id) & (DailyReading.reading_date == day))
    ).first()
    return row.pages_read if row else 0
