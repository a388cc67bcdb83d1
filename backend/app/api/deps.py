from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.services.matching import CreatorMatchingService
from app.services.storage import MatchingStorage


def get_storage(db: AsyncSession = Depends(get_db)) -> MatchingStorage:
    return MatchingStorage(db)


def get_matching_service(storage: MatchingStorage = Depends(get_storage)) -> CreatorMatchingService:
    return CreatorMatchingService(storage)
