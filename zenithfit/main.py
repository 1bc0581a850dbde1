import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zenithfit.api.router import api_router
from zenithfit.core.config import settings
from zenithfit.core.database import init_database
from zenithfit.core.logging import setup_logging
from zenithfit.services import s3_service

logger = logging.getLogger(__name__)

app = FastAPI(title="ZenithFit - training, nutrition and coaching in one place")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Chat-Session-Id", "X-Message-Id"],
)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.on_event("startup")
async def startup_event():
    setup_logging()
    await init_database()
    if settings.STORE_MEAL_PHOTOS:
        await s3_service.ensure_bucket_exists()
    logger.info("ZenithFit API started")


@app.get("/")
async def root():
    base_url = "http://localhost:8000"
    prefix = settings.API_V1_PREFIX

    return {
        "app": "ZenithFit",
        "message": "ZenithFit - your AI training partner",
        "links": {
            "Profile": f"{base_url}{prefix}/profile",
            "Workouts": f"{base_url}{prefix}/workouts/plan",
            "Nutrition": f"{base_url}{prefix}/nutrition/summary",
            "Coach": f"{base_url}{prefix}/coach/sessions",
            "Analytics": f"{base_url}{prefix}/analytics/summary",
            "Docs": f"{base_url}/docs",
            "ReDoc": f"{base_url}/redoc",
        },
    }


@app.get("/health")
async def health():
    return {"status": "ok"}
