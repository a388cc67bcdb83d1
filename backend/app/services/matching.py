import logging
from typing import Optional

from pydantic import ValidationError

from app.config import get_settings
from app.errors import NotFoundError, ProfileValidationError
from app.models.campaign import Campaign, MatchingResult
from app.schemas import CreatorProfileUpdate, MatchView, Recommendations
from app.services.scoring import MatchScore, MatchScorer, follower_bounds, is_recommended
from app.services.storage import MatchingStorage

logger = logging.getLogger(__name__)


def default_preferences(campaign: Campaign) -> dict:
    """Preferences used for a campaign that has none yet."""
    compensation = campaign.compensation or 0
    return {
        "preferred_categories": [campaign.category] if campaign.category else [],
        "required_platforms": ["instagram", "youtube"],
        "min_follower_count": 1000,
        "max_follower_count": 100_000,
        "preferred_demographics": {"age_range": "18-35", "gender": "any"},
        "budget_range": {"min": compensation * 0.8, "max": compensation * 1.2},
        "location_preferences": ["any"],
    }


def top_matches(scores: list[MatchScore], limit: int) -> list[MatchScore]:
    """The ``limit`` best scores, returned in their original scan order.

    Ties keep scan order because ``sorted`` is stable.
    """
    if limit <= 0:
        return []
    ranked = sorted(range(len(scores)), key=lambda i: scores[i].score, reverse=True)
    keep = sorted(ranked[:limit])
    return [scores[i] for i in keep]


class CreatorMatchingService:
    """Scores creators against campaigns and persists the results."""

    def __init__(
        self,
        storage: MatchingStorage,
        scorer: Optional[MatchScorer] = None,
        recommendation_limit: Optional[int] = None,
    ):
        self.storage = storage
        self.scorer = scorer or MatchScorer()
        if recommendation_limit is None:
            recommendation_limit = get_settings().recommendation_limit
        self.recommendation_limit = recommendation_limit

    async def _load_campaign(self, campaign_id: int):
        campaign = await self.storage.get_campaign(campaign_id)
        if not campaign:
            raise NotFoundError("campaign", campaign_id)
        prefs = await self.storage.get_or_create_brand_preferences(
            campaign_id, default_preferences(campaign)
        )
        return campaign, prefs

    async def _save_score(self, campaign_id: int, match: MatchScore) -> MatchingResult:
        score = round(match.score, 2)
        return await self.storage.upsert_matching_result(
            campaign_id,
            match.creator_id,
            {
                "match_score": score,
                "match_factors": match.factors.model_dump(),
                "is_recommended": is_recommended(score),
            },
        )

    async def find_matching_creators(
        self, campaign_id: int, limit: Optional[int] = None
    ) -> list[MatchView]:
        """Run a scoring pass for a campaign and return its ranked results.

        Only the top ``limit`` scores of this run are written. The returned
        list holds every result stored for the campaign, including rows
        left by earlier runs.
        """
        if limit is None:
            limit = get_settings().default_match_limit
        try:
            _, prefs = await self._load_campaign(campaign_id)
            low, high = follower_bounds(prefs.min_follower_count, prefs.max_follower_count)
            candidates = await self.storage.list_eligible_creators(low, high)

            scores = [self.scorer.score(creator, profile, prefs) for creator, profile in candidates]
            selected = top_matches(scores, limit)
            for match in selected:
                await self._save_score(campaign_id, match)

            logger.info(
                "Campaign %s: scored %d eligible creators, saved %d",
                campaign_id, len(scores), len(selected),
            )
            results = await self.storage.list_matching_results(campaign_id)
        except NotFoundError:
            raise
        except Exception:
            logger.exception("Error finding matching creators for campaign %s", campaign_id)
            raise

        return [MatchView.from_result(r) for r in results]

    async def get_creator_recommendations(self, campaign_id: int) -> Recommendations:
        matches = await self.find_matching_creators(campaign_id, self.recommendation_limit)

        top_recommended = [m for m in matches if m.is_recommended]
        other_matches = [m for m in matches if not m.is_recommended]
        total = len(matches)
        average = sum(m.match_score for m in matches) / total if total else 0.0

        return Recommendations(
            top_recommended=top_recommended,
            other_matches=other_matches,
            total_found=total,
            average_score=average,
        )

    async def score_creator_for_campaign(
        self, campaign_id: int, creator_id: int
    ) -> Optional[MatchingResult]:
        """Score a single creator against a campaign and upsert that one pair.

        Returns None, writing nothing, when the creator is outside the
        campaign's eligibility filter.
        """
        _, prefs = await self._load_campaign(campaign_id)
        low, high = follower_bounds(prefs.min_follower_count, prefs.max_follower_count)
        candidates = await self.storage.list_eligible_creators(low, high, creator_id=creator_id)
        if not candidates:
            logger.debug("Creator %s not eligible for campaign %s", creator_id, campaign_id)
            return None

        creator, profile = candidates[0]
        return await self._save_score(campaign_id, self.scorer.score(creator, profile, prefs))

    async def update_creator_profile(self, creator_id: int, profile_data: dict) -> None:
        """Merge a partial profile payload, then re-score the creator.

        Re-scoring walks every active campaign one after the other.
        """
        try:
            update = CreatorProfileUpdate.model_validate(profile_data)
        except ValidationError as e:
            raise ProfileValidationError(e.errors()) from e

        try:
            creator = await self.storage.get_creator(creator_id)
            if not creator:
                raise NotFoundError("creator", creator_id)

            await self.storage.upsert_creator_profile(creator_id, update.model_dump(exclude_unset=True))
        except NotFoundError:
            raise
        except Exception:
            logger.exception("Error updating profile for creator %s", creator_id)
            raise

        await self.recalculate_creator_matching(creator_id)

    async def recalculate_creator_matching(self, creator_id: int) -> int:
        """Re-score a creator against all active campaigns. Returns rows written."""
        campaigns = await self.storage.list_active_campaigns()
        written = 0
        for campaign in campaigns:
            try:
                if await self.score_creator_for_campaign(campaign.id, creator_id):
                    written += 1
            except Exception:
                logger.exception(
                    "Recalculation failed for creator %s on campaign %s", creator_id, campaign.id
                )
                raise
        logger.info(
            "Creator %s re-scored against %d active campaigns (%d results)",
            creator_id, len(campaigns), written,
        )
        return written

    async def contact_creator(self, campaign_id: int, creator_id: int) -> MatchView:
        row = await self.storage.set_matching_status(campaign_id, creator_id, "contacted")
        if row is None:
            raise NotFoundError("matching result", f"{campaign_id}/{creator_id}")
        logger.info("Campaign %s contacted creator %s", campaign_id, creator_id)
        results = await self.storage.list_matching_results(campaign_id)
        return next(MatchView.from_result(r) for r in results if r.creator_id == creator_id)
