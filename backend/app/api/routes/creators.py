from fastapi import APIRouter, Depends, HTTPException, Response

from app.api.deps import get_matching_service, get_storage
from app.errors import NotFoundError, ProfileValidationError
from app.schemas import CreatorCreate, CreatorProfileUpdate
from app.services.matching import CreatorMatchingService
from app.services.storage import MatchingStorage

router = APIRouter(prefix="/api/creators", tags=["creators"])


@router.post("", status_code=201)
async def create_creator(body: CreatorCreate, storage: MatchingStorage = Depends(get_storage)):
    creator = await storage.create_creator(body.model_dump())
    return {
        "id": creator.id,
        "username": creator.username,
        "platform": creator.platform,
        "follower_count": creator.follower_count,
        "tier": creator.tier,
        "completed_campaigns": creator.completed_campaigns,
        "role": creator.role,
        "is_active": creator.is_active,
        "created_at": creator.created_at,
    }


@router.get("/{creator_id}/profile")
async def get_profile(creator_id: int, storage: MatchingStorage = Depends(get_storage)):
    profile = await storage.get_creator_profile(creator_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {
        "creator_id": profile.creator_id,
        "categories": profile.categories,
        "platforms": profile.platforms,
        "demographics": profile.demographics,
        "engagement_rate": profile.engagement_rate,
        "average_views": profile.average_views,
        "collaboration_preferences": profile.collaboration_preferences,
        "portfolio_items": profile.portfolio_items,
        "is_verified": profile.is_verified,
        "updated_at": profile.updated_at,
    }


@router.put("/{creator_id}/profile", status_code=204)
async def update_profile(
    creator_id: int,
    body: CreatorProfileUpdate,
    matcher: CreatorMatchingService = Depends(get_matching_service),
):
    try:
        await matcher.update_creator_profile(creator_id, body.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Creator not found")
    except ProfileValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    return Response(status_code=204)
