from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_matching_service, get_storage
from app.config import get_settings
from app.errors import NotFoundError
from app.schemas import (
    BrandPreferencesIn,
    CampaignCreate,
    ContactCreatorRequest,
    MatchView,
    Recommendations,
)
from app.services.matching import CreatorMatchingService, default_preferences
from app.services.storage import MatchingStorage

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])

settings = get_settings()


def _campaign_dict(campaign) -> dict:
    return {
        "id": campaign.id,
        "title": campaign.title,
        "description": campaign.description,
        "brand_name": campaign.brand_name,
        "category": campaign.category,
        "type": campaign.type,
        "compensation": campaign.compensation,
        "status": campaign.status,
        "created_at": campaign.created_at,
    }


def _preferences_dict(prefs) -> dict:
    return {
        "campaign_id": prefs.campaign_id,
        "preferred_categories": prefs.preferred_categories,
        "required_platforms": prefs.required_platforms,
        "min_follower_count": prefs.min_follower_count,
        "max_follower_count": prefs.max_follower_count,
        "preferred_demographics": prefs.preferred_demographics,
        "budget_range": prefs.budget_range,
        "location_preferences": prefs.location_preferences,
    }


async def _require_campaign(storage: MatchingStorage, campaign_id: int):
    campaign = await storage.get_campaign(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.post("", status_code=201)
async def create_campaign(body: CampaignCreate, storage: MatchingStorage = Depends(get_storage)):
    campaign = await storage.create_campaign(body.model_dump())
    return _campaign_dict(campaign)


@router.get("")
async def list_campaigns(storage: MatchingStorage = Depends(get_storage)):
    return [_campaign_dict(c) for c in await storage.list_campaigns()]


@router.get("/{campaign_id}")
async def get_campaign(campaign_id: int, storage: MatchingStorage = Depends(get_storage)):
    return _campaign_dict(await _require_campaign(storage, campaign_id))


@router.get("/{campaign_id}/preferences")
async def get_preferences(campaign_id: int, storage: MatchingStorage = Depends(get_storage)):
    campaign = await _require_campaign(storage, campaign_id)
    prefs = await storage.get_or_create_brand_preferences(campaign_id, default_preferences(campaign))
    return _preferences_dict(prefs)


@router.put("/{campaign_id}/preferences")
async def replace_preferences(
    campaign_id: int,
    body: BrandPreferencesIn,
    storage: MatchingStorage = Depends(get_storage),
):
    await _require_campaign(storage, campaign_id)
    prefs = await storage.replace_brand_preferences(campaign_id, body.model_dump())
    return _preferences_dict(prefs)


@router.get("/{campaign_id}/matches", response_model=list[MatchView])
async def get_matches(
    campaign_id: int,
    limit: int = Query(settings.default_match_limit, ge=1, le=200),
    matcher: CreatorMatchingService = Depends(get_matching_service),
):
    try:
        return await matcher.find_matching_creators(campaign_id, limit)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Campaign not found")


@router.get("/{campaign_id}/recommendations", response_model=Recommendations)
async def get_recommendations(
    campaign_id: int,
    matcher: CreatorMatchingService = Depends(get_matching_service),
):
    try:
        return await matcher.get_creator_recommendations(campaign_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Campaign not found")


@router.post("/{campaign_id}/contact-creator", response_model=MatchView)
async def contact_creator(
    campaign_id: int,
    body: ContactCreatorRequest,
    matcher: CreatorMatchingService = Depends(get_matching_service),
):
    try:
        return await matcher.contact_creator(campaign_id, body.creator_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Creator has not been matched to this campaign")
