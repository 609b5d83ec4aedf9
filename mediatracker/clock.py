from datetime import date, datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today(use_utc: bool = False) -> date:
    """Calendar day used for the daily reading aggregate."""
    if use_utc:
        return utcnow().date()
    return date.today()


def current_year(use_utc: bool = False) -> int:
    return today(use_utc).year
