from __future__ import annotations

from typing import Dict, Optional

import structlog
from sqlmodel import Session, select

from ..clock import current_year
from ..db import insert_for
from ..models import AnnualCategory, AnnualStats, MediaType

logger = structlog.get_logger()

CATEGORY_BY_TYPE: Dict[MediaType, AnnualCategory] = {
    MediaType.movie: AnnualCategory.movies_watched,
    MediaType.tv: AnnualCategory.tv_shows_finished,
    MediaType.book: AnnualCategory.books_read,
    MediaType.comic: AnnualCategory.comics_read,
}


def category_for(media_type: str) -> Optional[AnnualCategory]:
    try:
        return CATEGORY_BY_TYPE.get(MediaType(media_type))
    except ValueError:
        return None


def record_completion(session: Session, owner_id: int, media_type: str, year: Optional[int] = None) -> None:
    """Count one completion of ``media_type`` for the owner's year.

    Types without a counter are ignored. The caller commits.
    """
    category = category_for(media_type)
    if category is None:
        return
    if year is None:
        year = current_year()

    column = category.value
    stmt = insert_for(session, AnnualStats).values(user_id=owner_id, year=year, **{column: 1})
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "year"],
        set_={column: getattr(AnnualStats, column) + 1},
    )
    session.execute(stmt)
    logger.info("annual_stat_incremented", user_id=owner_id, year=year, category=column)


def get_annual_stats(session: Session, owner_id: int, year: Optional[int] = None) -> Dict[str, int]:
    if year is None:
        year = current_year()
    row = session.exec(
        select(AnnualStats).where((AnnualStats.user_id == owner_id) & (AnnualStats.year == year))
    ).first()
    out: Dict[str, int] = {"year": year}
    for category in AnnualCategory:
        out[category.value] = getattr(row, category.value) if row else 0
    return out
