from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from app.database import Base


class StoreEntryMixin:
    user_id = Column(String(255), primary_key=True)
    key = Column(String(255), primary_key=True)
    value = Column(Text)
    updated_at = Column(DateTime, server_default=func.now())


class PlaybackEntry(StoreEntryMixin, Base):
    __tablename__ = "playback_store"


class FavoriteEntry(StoreEntryMixin, Base):
    __tablename__ = "favorites_store"
