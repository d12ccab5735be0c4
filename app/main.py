import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.database import async_session, init_db
from app.core.errors import ConsistencyFailure, DomainError, ValidationError
from app.routers import api_router
from app.services.bootstrap import ensure_default_fields

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

TAGS_METADATA = [
    {"name": "Review schema", "description": "The review form: rating categories and text fields, in display order."},
    {"name": "Reviews", "description": "Homeowner reviews of builders. Every change refreshes the builder's rating."},
    {"name": "Builders", "description": "Directory search and builder profiles with their reviews."},
    {"name": "Profile", "description": "Current user and the reviews they wrote."},
    {"name": "Admin", "description": "Review form configuration, builder moderation and platform totals."},
    {"name": "Upload", "description": "Photo upload. Returns URLs to attach to reviews."},
]

DESCRIPTION = """
# BuildRate API

Directory and reviews of home builders.

All mutating requests require:
```
Authorization: Bearer <token>
```

Review values are submitted as a mapping keyed by review field `name`
(see `GET /v1/review-schema`). Builder `average_rating` is the mean of each
review's average numeric rating and is `null` until the first review.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    async with async_session() as db:
        await ensure_default_fields(db)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=DESCRIPTION,
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if isinstance(exc, ConsistencyFailure):
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    content = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["missing_fields"] = exc.missing_fields
        content["out_of_range_fields"] = exc.out_of_range_fields
    return JSONResponse(status_code=exc.status_code, content=content)


app.include_router(api_router, prefix=settings.API_V1_PREFIX)

app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/health", tags=["Health"])
async def health():
    """Liveness check."""
    return {"status": "ok"}
