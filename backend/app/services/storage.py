import functools
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import DataAccessError
from app.models.campaign import BrandPreferences, Campaign, MatchingResult
from app.models.creator import Creator, CreatorProfile

logger = logging.getLogger(__name__)

# Roles that can be matched against campaigns
CREATOR_ROLES = ("user", "creator")

# Dialect inserts that support ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _data_access(method):
    """Roll back and re-raise store failures as DataAccessError."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.warning("Store operation %s failed: %s", method.__name__, e)
            await self.db.rollback()
            raise DataAccessError(f"{method.__name__} failed: {e}") from e

    return wrapper


class MatchingStorage:
    """Reads and writes the tables the matching engine depends on.

    Every write commits on its own; there is no transaction spanning a
    whole scoring run.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Campaigns ----------------------------------------------------------

    @_data_access
    async def get_campaign(self, campaign_id: int) -> Optional[Campaign]:
        result = await self.db.execute(select(Campaign).where(Campaign.id == campaign_id))
        return result.scalar_one_or_none()

    @_data_access
    async def list_campaigns(self) -> list[Campaign]:
        result = await self.db.execute(select(Campaign).order_by(Campaign.created_at.desc(), Campaign.id.desc()))
        return list(result.scalars().all())

    @_data_access
    async def list_active_campaigns(self) -> list[Campaign]:
        result = await self.db.execute(
            select(Campaign).where(Campaign.status == "active").order_by(Campaign.id)
        )
        return list(result.scalars().all())

    @_data_access
    async def create_campaign(self, data: dict) -> Campaign:
        campaign = Campaign(**data)
        self.db.add(campaign)
        await self.db.commit()
        await self.db.refresh(campaign)
        return campaign

    # --- Brand preferences --------------------------------------------------

    @_data_access
    async def get_brand_preferences(self, campaign_id: int) -> Optional[BrandPreferences]:
        result = await self.db.execute(
            select(BrandPreferences).where(BrandPreferences.campaign_id == campaign_id)
        )
        return result.scalar_one_or_none()

    @_data_access
    async def get_or_create_brand_preferences(self, campaign_id: int, defaults: dict) -> BrandPreferences:
        prefs = await self.get_brand_preferences(campaign_id)
        if prefs:
            return prefs

        prefs = BrandPreferences(campaign_id=campaign_id, **defaults)
        self.db.add(prefs)
        await self.db.commit()
        await self.db.refresh(prefs)
        logger.info("Created default brand preferences for campaign %s", campaign_id)
        return prefs

    @_data_access
    async def replace_brand_preferences(self, campaign_id: int, data: dict) -> BrandPreferences:
        prefs = await self.get_brand_preferences(campaign_id)
        if prefs is None:
            prefs = BrandPreferences(campaign_id=campaign_id)
            self.db.add(prefs)
        for field, value in data.items():
            setattr(prefs, field, value)
        prefs.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(prefs)
        return prefs

    # --- Creators -----------------------------------------------------------

    @_data_access
    async def get_creator(self, creator_id: int) -> Optional[Creator]:
        result = await self.db.execute(
            select(Creator)
            .options(selectinload(Creator.profile))
            .where(Creator.id == creator_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @_data_access
    async def create_creator(self, data: dict) -> Creator:
        creator = Creator(**data)
        self.db.add(creator)
        await self.db.commit()
        await self.db.refresh(creator)
        return creator

    @_data_access
    async def list_eligible_creators(
        self,
        min_followers: int,
        max_followers: int,
        creator_id: Optional[int] = None,
    ) -> list[tuple[Creator, Optional[CreatorProfile]]]:
        """Active creator-role accounts whose follower count is within range.

        Rows come back in id order, paired with their profile (or None).
        """
        query = (
            select(Creator)
            .options(selectinload(Creator.profile))
            .where(
                Creator.is_active.is_(True),
                Creator.role.in_(CREATOR_ROLES),
                Creator.follower_count >= min_followers,
                Creator.follower_count <= max_followers,
            )
            .order_by(Creator.id)
            .execution_options(populate_existing=True)
        )
        if creator_id is not None:
            query = query.where(Creator.id == creator_id)
        result = await self.db.execute(query)
        return [(c, c.profile) for c in result.scalars().all()]

    @_data_access
    async def get_creator_profile(self, creator_id: int) -> Optional[CreatorProfile]:
        result = await self.db.execute(
            select(CreatorProfile).where(CreatorProfile.creator_id == creator_id)
        )
        return result.scalar_one_or_none()

    @_data_access
    async def upsert_creator_profile(self, creator_id: int, data: dict) -> CreatorProfile:
        """Shallow-merge ``data`` into the creator's profile, creating it if needed."""
        profile = await self.get_creator_profile(creator_id)
        if profile is None:
            profile = CreatorProfile(creator_id=creator_id)
            self.db.add(profile)
        for field, value in data.items():
            setattr(profile, field, value)
        profile.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(profile)
        return profile

    # --- Matching results ---------------------------------------------------

    @_data_access
    async def get_matching_result(self, campaign_id: int, creator_id: int) -> Optional[MatchingResult]:
        result = await self.db.execute(
            select(MatchingResult)
            .where(
                MatchingResult.campaign_id == campaign_id,
                MatchingResult.creator_id == creator_id,
            )
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @_data_access
    async def upsert_matching_result(self, campaign_id: int, creator_id: int, data: dict) -> MatchingResult:
        """Write the (campaign, creator) row with the store's native single-row upsert.

        Concurrent writers for the same pair do not collide: the last write wins.
        The row's status is left untouched on update.
        """
        values = {"campaign_id": campaign_id, "creator_id": creator_id, **data}
        changes = {**data, "updated_at": datetime.now(timezone.utc)}

        dialect = self.db.get_bind().dialect.name
        if dialect == "mysql":
            stmt = mysql_insert(MatchingResult).values(**values).on_duplicate_key_update(**changes)
        elif dialect in UPSERT_INSERTS:
            stmt = UPSERT_INSERTS[dialect](MatchingResult).values(**values).on_conflict_do_update(
                index_elements=[MatchingResult.campaign_id, MatchingResult.creator_id],
                set_=changes,
            )
        else:
            raise DataAccessError(f"No single-row upsert available for dialect {dialect!r}")

        await self.db.execute(stmt)
        await self.db.commit()
        return await self.get_matching_result(campaign_id, creator_id)

    @_data_access
    async def set_matching_status(self, campaign_id: int, creator_id: int, status: str) -> Optional[MatchingResult]:
        row = await self.get_matching_result(campaign_id, creator_id)
        if row is None:
            return None
        row.status = status
        row.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        return row

    @_data_access
    async def list_matching_results(self, campaign_id: int) -> list[MatchingResult]:
        """All results for a campaign with creator and profile loaded, best first."""
        result = await self.db.execute(
            select(MatchingResult)
            .options(selectinload(MatchingResult.creator).selectinload(Creator.profile))
            .where(MatchingResult.campaign_id == campaign_id)
            .order_by(MatchingResult.match_score.desc(), MatchingResult.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
