from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.routers.reviews import review_item
from app.schemas.profile import ProfileResponse
from app.schemas.review import ReviewListResponse
from app.services import reviews as review_store

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse, summary="Current user")
async def get_profile(user: User = Depends(get_current_user)):
    return ProfileResponse.model_validate(user)


@router.get("/reviews", response_model=ReviewListResponse, summary="My reviews", description="Reviews written by the current user, newest first, with the builder's current name, logo, location and verification.")
async def get_my_reviews(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    details = await review_store.list_reviews_for_author(db, user.id)
    return ReviewListResponse(reviews=[review_item(d) for d in details])
