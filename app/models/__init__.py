from app.models.user import User
from app.models.store import PlaybackEntry, FavoriteEntry

__all__ = [
    "User",
    "PlaybackEntry",
    "FavoriteEntry",
]
