from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from app.db.database import Base


class Creator(Base):
    __tablename__ = "creators"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    email = Column(String)
    platform = Column(String)  # instagram, youtube, tiktok, twitter, multiple
    follower_count = Column(Integer, default=0, index=True)
    bio = Column(Text)
    profile_image = Column(String)
    tier = Column(String, default="standard")  # standard, rising, legendary
    completed_campaigns = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    role = Column(String, default="user")  # user, creator, brand, admin
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    profile = relationship("CreatorProfile", back_populates="creator", uselist=False)
    matching_results = relationship("MatchingResult", back_populates="creator")


class CreatorProfile(Base):
    __tablename__ = "creator_profiles"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("creators.id"), nullable=False, unique=True)

    categories = Column(JSON, default=list)
    platforms = Column(JSON, default=list)  # [{"platform": "instagram", "handle": "@..."}]
    demographics = Column(JSON, default=dict)
    engagement_rate = Column(Float)  # percent, e.g. 4.5
    average_views = Column(Integer)
    collaboration_preferences = Column(JSON, default=dict)
    portfolio_items = Column(JSON, default=list)
    is_verified = Column(Boolean, default=False)
    matching_score = Column(Float)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    creator = relationship("Creator", back_populates="profile")
