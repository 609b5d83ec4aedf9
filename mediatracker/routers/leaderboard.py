from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .auth import get_current_user, get_settings, User
from ..clock import current_year, today
from ..config import Settings
from ..db import get_session
from ..schemas import AnnualLeaderboardEntry, DailyLeaderboardEntry
from ..services import leaderboard

router = APIRouter()


@router.get("/daily-reading", response_model=List[DailyLeaderboardEntry])
def daily_reading(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    return leaderboard.daily_reading_leaderboard(session, today=today(settings.use_utc_day))


@router.get("/annual/{category}", response_model=List[AnnualLeaderboardEntry])
def annual(
    category: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    return leaderboard.annual_leaderboard(session, category, year=current_year(settings.use_utc_day))
