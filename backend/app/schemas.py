from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MatchFactors(BaseModel):
    """Per-factor breakdown of a match score.

    ``demographic_match`` and ``location_match`` are part of the stored shape
    but are not computed yet and always hold 0.
    """

    category_match: float = 0.0
    platform_match: float = 0.0
    follower_match: float = 0.0
    demographic_match: float = 0.0
    location_match: float = 0.0
    engagement_match: float = 0.0
    portfolio_match: float = 0.0

    def total(self) -> float:
        return (
            self.category_match
            + self.platform_match
            + self.follower_match
            + self.demographic_match
            + self.location_match
            + self.engagement_match
            + self.portfolio_match
        )


# --- Requests -----------------------------------------------------------------


class CampaignCreate(BaseModel):
    title: str
    brand_name: str
    category: str
    description: str = ""
    type: Literal["online", "onsite", "both"] = "online"
    compensation: int = Field(0, ge=0)
    status: Literal["active", "paused", "completed"] = "active"


class BudgetRange(BaseModel):
    min: float = Field(0, ge=0)
    max: float = Field(0, ge=0)


class BrandPreferencesIn(BaseModel):
    preferred_categories: list[str] = []
    required_platforms: list[str] = []
    min_follower_count: int = Field(0, ge=0)
    max_follower_count: int = Field(1_000_000, ge=0)
    preferred_demographics: dict[str, Any] = {}
    budget_range: Optional[BudgetRange] = None
    location_preferences: list[str] = []

    @model_validator(mode="after")
    def check_follower_range(self) -> "BrandPreferencesIn":
        if self.min_follower_count > self.max_follower_count:
            raise ValueError("min_follower_count must not exceed max_follower_count")
        return self


class CreatorCreate(BaseModel):
    username: str
    email: Optional[str] = None
    platform: Optional[str] = None
    follower_count: int = Field(0, ge=0)
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    tier: Literal["standard", "rising", "legendary"] = "standard"
    completed_campaigns: int = Field(0, ge=0)
    role: Literal["user", "creator", "brand", "admin"] = "creator"
    is_active: bool = True


class PlatformAccount(BaseModel):
    model_config = ConfigDict(extra="allow")

    platform: str
    handle: Optional[str] = None


class CreatorProfileUpdate(BaseModel):
    """Partial profile payload. Only fields that are sent get written."""

    model_config = ConfigDict(extra="forbid")

    categories: Optional[list[str]] = None
    platforms: Optional[list[PlatformAccount]] = None
    demographics: Optional[dict[str, Any]] = None
    engagement_rate: Optional[float] = Field(None, ge=0, le=100)
    average_views: Optional[int] = Field(None, ge=0)
    collaboration_preferences: Optional[dict[str, Any]] = None
    portfolio_items: Optional[list[Any]] = None
    is_verified: Optional[bool] = None


class ContactCreatorRequest(BaseModel):
    creator_id: int


# --- Responses ----------------------------------------------------------------


class CreatorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    platform: Optional[str] = None
    follower_count: Optional[int] = None
    tier: Optional[str] = None
    profile_image: Optional[str] = None
    completed_campaigns: Optional[int] = None


class ProfileSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    engagement_rate: Optional[float] = None
    average_views: Optional[int] = None
    is_verified: Optional[bool] = None
    categories: Optional[list[str]] = None
    platforms: Optional[list[Any]] = None


class MatchView(BaseModel):
    """A persisted matching result joined with creator display fields."""

    id: int
    campaign_id: int
    creator_id: int
    match_score: float
    match_factors: MatchFactors
    is_recommended: bool
    status: str
    created_at: Optional[datetime] = None
    creator: Optional[CreatorSummary] = None
    profile: Optional[ProfileSummary] = None

    @classmethod
    def from_result(cls, result) -> "MatchView":
        creator = result.creator
        profile = creator.profile if creator is not None else None
        return cls(
            id=result.id,
            campaign_id=result.campaign_id,
            creator_id=result.creator_id,
            match_score=result.match_score,
            match_factors=MatchFactors(**(result.match_factors or {})),
            is_recommended=bool(result.is_recommended),
            status=result.status,
            created_at=result.created_at,
            creator=CreatorSummary.model_validate(creator) if creator is not None else None,
            profile=ProfileSummary.model_validate(profile) if profile is not None else None,
        )


class Recommendations(BaseModel):
    top_recommended: list[MatchView]
    other_matches: list[MatchView]
    total_found: int
    average_score: float
