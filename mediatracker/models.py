from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship


class MediaType(str, Enum):
    movie = "movie"
    tv = "tv"
    book = "book"
    comic = "comic"


class MediaStatus(str, Enum):
    watchlist = "watchlist"
    readlist = "readlist"
    watched = "watched"
    read = "read"


class AnnualCategory(str, Enum):
    books_read = "books_read"
    comics_read = "comics_read"
    movies_watched = "movies_watched"
    tv_shows_finished = "tv_shows_finished"


class User(SQLModel, table=True):
    __tablename__ = "users"  # type: ignore[assignment]

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    username: str = Field(index=True, unique=True)
    hashed_password: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    favorite_movies: Optional[str] = None
    favorite_shows: Optional[str] = None
    favorite_books: Optional[str] = None
    favorite_genres: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    items: list["MediaItem"] = Relationship(back_populates="user")


class MediaItem(SQLModel, table=True):
    __tablename__ = "media_items"  # type: ignore[assignment]

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    title: str
    type: MediaType
    status: MediaStatus  # list (watchlist|readlist) or log (watched|read)
    rating: Optional[float] = None
    review: Optional[str] = None
    release_date: Optional[str] = None
    pages_read: int = 0
    total_pages: Optional[int] = None
    is_finished: bool = False
    date_added: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    # Written once, by the first transition to finished. See services.completion.
    date_completed: Optional[datetime] = None

    user: Optional[User] = Relationship(back_populates="items")


class DailyReading(SQLModel, table=True):
    __tablename__ = "daily_reading"  # type: ignore[assignment]
    __table_args__ = (UniqueConstraint("user_id", "reading_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id")
    reading_date: date
    pages_read: int = 0


class AnnualStats(SQLModel, table=True):
    __tablename__ = "annual_stats"  # type: ignore[assignment]
    __table_args__ = (UniqueConstraint("user_id", "year"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id")
    year: int
    books_read: int = 0
    comics_read: int = 0
    movies_watched: int = 0
    tv_shows_finished: int = 0
