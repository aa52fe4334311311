"""SQLAlchemy database models."""
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from upsell.database import Base


class ShopSession(Base):
    """Offline access token issued to the app for one shop."""
    __tablename__ = "shop_sessions"

    id = Column(Integer, primary_key=True, index=True)
    shop = Column(String(255), unique=True, nullable=False, index=True)
    access_token = Column(String(255), nullable=False)
    scope = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
