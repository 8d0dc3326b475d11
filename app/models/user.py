from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from app.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(255), primary_key=True)  # Google subject id
    email = Column(String(320), nullable=False)
    name = Column(String(255), nullable=False)
    picture = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    last_login = Column(DateTime, server_default=func.now())
