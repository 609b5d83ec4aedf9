"""Leaderboards over the daily reading and annual stats aggregates.

Only users with an aggregate row for the window appear; there are no
zero-filled entries for inactive users. Equal scores are ordered by username.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from ..clock import current_year, today as local_today
from ..errors import ValidationError
from ..models import AnnualCategory, AnnualStats, DailyReading, User


def daily_reading_leaderboard(session: Session, today: Optional[date] = None) -> List[Dict[str, Any]]:
    day = today or local_today()
    rows = session.exec(
        select(User.username, User.profile_picture, DailyReading.pages_read)
        .select_from(DailyReading)
        .join(User, DailyReading.user_id == User.id)  # type: ignore[arg-type]
        .where(DailyReading.reading_date == day)
        .order_by(DailyReading.pages_read.desc(), User.username.asc())  # type: ignore[attr-defined]
    ).all()
    return [
        {"username": username, "profile_picture": picture, "pages_read": pages}
        for username, picture, pages in rows
    ]


def parse_category(category: str) -> AnnualCategory:
    try:
        return AnnualCategory(category)
    except ValueError:
        raise ValidationError("Invalid category")


def annual_leaderboard(session: Session, category: str, year: Optional[int] = None) -> List[Dict[str, Any]]:
    column = getattr(AnnualStats, parse_category(category).value)
    if year is None:
        year = current_year()
    rows = session.exec(
        select(User.username, User.profile_picture, column)
        .select_from(AnnualStats)
        .join(User, AnnualStats.user_id == User.id)  # type: ignore[arg-type]
        .where(AnnualStats.year == year)
        .order_by(column.desc(), User.username.asc())  # type: ignore[attr-defined]
    ).all()
    return [
        {"username": username, "profile_picture": picture, "count": count}
        for username, picture, count in rows
    ]
