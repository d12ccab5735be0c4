from fastapi import APIRouter

from app.routers import admin, builders, profile, review_schema, reviews, upload

api_router = APIRouter()

api_router.include_router(review_schema.router)
api_router.include_router(review_schema.admin_router)
api_router.include_router(reviews.router)
api_router.include_router(builders.router)
api_router.include_router(profile.router)
api_router.include_router(admin.router)
api_router.include_router(upload.router)
