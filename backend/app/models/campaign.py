from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from app.db.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    brand_name = Column(String, nullable=False)
    category = Column(String, nullable=False)  # fashion, food, tech, lifestyle, ...
    type = Column(String, default="online")  # online, onsite, both
    compensation = Column(Integer, nullable=False, default=0)
    status = Column(String, default="active", index=True)  # active, paused, completed
    created_at = Column(DateTime, default=_utcnow)

    preferences = relationship(
        "BrandPreferences", back_populates="campaign", uselist=False, cascade="all, delete-orphan"
    )
    matching_results = relationship(
        "MatchingResult", back_populates="campaign", cascade="all, delete-orphan"
    )


class BrandPreferences(Base):
    __tablename__ = "brand_preferences"

    id = Column(Integer, primary_key=True, index=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id"), nullable=False, unique=True)
    preferred_categories = Column(JSON, default=list)
    required_platforms = Column(JSON, default=list)
    min_follower_count = Column(Integer)
    max_follower_count = Column(Integer)
    preferred_demographics = Column(JSON, default=dict)  # e.g. {"age_range": "18-35", "gender": "any"}
    budget_range = Column(JSON, default=dict)  # {"min": ..., "max": ...}
    location_preferences = Column(JSON, default=list)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow)

    campaign = relationship("Campaign", back_populates="preferences")


class MatchingResult(Base):
    __tablename__ = "matching_results"
    __table_args__ = (
        UniqueConstraint("campaign_id", "creator_id", name="uq_matching_results_campaign_creator"),
    )

    id = Column(Integer, primary_key=True, index=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id"), nullable=False, index=True)
    creator_id = Column(Integer, ForeignKey("creators.id"), nullable=False, index=True)
    match_score = Column(Float, nullable=False, default=0.0)
    match_factors = Column(JSON, default=dict)
    is_recommended = Column(Boolean, default=False)
    status = Column(String, default="uncontacted")  # uncontacted, contacted
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow)

    campaign = relationship("Campaign", back_populates="matching_results")
    creator = relationship("Creator", back_populates="matching_results")
