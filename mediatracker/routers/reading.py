from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .auth import get_current_user, get_settings, User
from ..clock import current_year, today
from ..config import Settings
from ..db import get_session
from ..schemas import DailyPages, Message
from ..services import reading, stats

router = APIRouter()


@router.post("/reading/daily", response_model=Message)
def add_daily_pages(
    body: DailyPages,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    reading.add_daily_pages(session, current_user.id, body.pages, today=today(settings.use_utc_day))
    return Message(message="Daily reading updated successfully")


@router.get("/reading/daily")
def get_daily_pages(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    day = today(settings.use_utc_day)
    return {"date": day.isoformat(), "pages_read": reading.get_daily_pages(session, current_user.id, today=day)}


@router.get("/stats/annual")
def get_annual_stats(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> Dict[str, int]:
    return stats.get_annual_stats(session, current_user.id, year=current_year(settings.use_utc_day))
