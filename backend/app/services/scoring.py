from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional

from app.schemas import MatchFactors


# Factor weights (max points each factor contributes)
CATEGORY_WEIGHT = 25.0
PLATFORM_WEIGHT = 20.0
FOLLOWER_WEIGHT = 15.0
ENGAGEMENT_WEIGHT = 15.0
PORTFOLIO_WEIGHT = 10.0

# Bonuses folded into the portfolio factor
TIER_BONUS = {
    "rising": 5.0,
    "legendary": 10.0,
}
VERIFIED_BONUS = 5.0

# Engagement rate (percent) that earns the full engagement weight
ENGAGEMENT_CEILING = 10.0
# Completed campaigns that earn the full portfolio weight
PORTFOLIO_CEILING = 10

# A follower count at or above this share of the preferred maximum scores full marks
OPTIMAL_FOLLOWER_SHARE = 0.7

DEFAULT_MIN_FOLLOWERS = 0
DEFAULT_MAX_FOLLOWERS = 1_000_000
DEFAULT_OPTIMAL_BASE = 100_000

MAX_SCORE = 100.0
RECOMMENDATION_THRESHOLD = 75.0


@dataclass(frozen=True)
class MatchScore:
    creator_id: int
    score: float
    factors: MatchFactors

    @property
    def is_recommended(self) -> bool:
        return is_recommended(self.score)


def is_recommended(score: float) -> bool:
    return score >= RECOMMENDATION_THRESHOLD


def follower_bounds(min_followers: Optional[int], max_followers: Optional[int]) -> tuple[int, int]:
    """Eligibility range for a preferences record, with unset bounds defaulted."""
    return (
        DEFAULT_MIN_FOLLOWERS if min_followers is None else min_followers,
        DEFAULT_MAX_FOLLOWERS if max_followers is None else max_followers,
    )


def platform_names(platforms: Optional[Iterable]) -> set[str]:
    """Extract platform names from a profile's platform entries."""
    names = set()
    for entry in platforms or []:
        if isinstance(entry, dict):
            name = entry.get("platform")
        else:
            name = entry
        if isinstance(name, str) and name:
            names.add(name)
    return names


class MatchScorer:
    """Scores one creator against one campaign's brand preferences.

    Pure computation: callers hand in the creator row, its profile (or None)
    and the preferences row. Nothing here touches the database.
    """

    def calculate_category_match(
        self, creator_categories: Optional[Iterable[str]], preferred_categories: Optional[Iterable[str]]
    ) -> float:
        preferred = set(preferred_categories or [])
        if not preferred:
            return 0.0
        overlap = set(creator_categories or []) & preferred
        return len(overlap) / len(preferred) * CATEGORY_WEIGHT

    def calculate_platform_match(
        self, creator_platforms: Optional[Iterable], required_platforms: Optional[Iterable[str]]
    ) -> float:
        required = set(required_platforms or [])
        if not required:
            return 0.0
        overlap = platform_names(creator_platforms) & required
        return len(overlap) / len(required) * PLATFORM_WEIGHT

    def calculate_follower_match(
        self,
        follower_count: Optional[int],
        min_followers: Optional[int],
        max_followers: Optional[int],
    ) -> float:
        followers = follower_count or 0
        low, high = follower_bounds(min_followers, max_followers)
        if followers < low or followers > high:
            return 0.0
        base = DEFAULT_OPTIMAL_BASE if max_followers is None else max_followers
        optimal = base * OPTIMAL_FOLLOWER_SHARE
        if followers >= optimal:
            return FOLLOWER_WEIGHT
        return followers / optimal * FOLLOWER_WEIGHT

    def calculate_engagement_match(self, engagement_rate: Optional[float]) -> float:
        rate = float(engagement_rate or 0)
        if rate <= 0:
            return 0.0
        return min(rate / ENGAGEMENT_CEILING * ENGAGEMENT_WEIGHT, ENGAGEMENT_WEIGHT)

    def calculate_portfolio_match(
        self,
        completed_campaigns: Optional[int],
        tier: Optional[str],
        is_verified: Optional[bool],
    ) -> float:
        """Experience score plus the tier and verification bonuses."""
        completed = completed_campaigns or 0
        score = 0.0
        if completed > 0:
            score = min(completed / PORTFOLIO_CEILING * PORTFOLIO_WEIGHT, PORTFOLIO_WEIGHT)
        score += TIER_BONUS.get((tier or "").lower(), 0.0)
        if is_verified:
            score += VERIFIED_BONUS
        return score

    def score(self, creator, profile, preferences) -> MatchScore:
        factors = MatchFactors(
            category_match=self.calculate_category_match(
                profile.categories if profile else None,
                preferences.preferred_categories,
            ),
            platform_match=self.calculate_platform_match(
                profile.platforms if profile else None,
                preferences.required_platforms,
            ),
            follower_match=self.calculate_follower_match(
                creator.follower_count,
                preferences.min_follower_count,
                preferences.max_follower_count,
            ),
            engagement_match=self.calculate_engagement_match(
                profile.engagement_rate if profile else None,
            ),
            portfolio_match=self.calculate_portfolio_match(
                creator.completed_campaigns,
                creator.tier,
                profile.is_verified if profile else False,
            ),
        )
        total = min(max(factors.total(), 0.0), MAX_SCORE)
        return MatchScore(creator_id=creator.id, score=total, factors=factors)
