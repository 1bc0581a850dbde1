import logging
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from zenithfit.core.config import settings
from zenithfit.core.dependencies import get_ai_service, get_document_store
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.schemas.nutrition import (
    DEFAULT_MEAL_NAME,
    DailySummary,
    FoodAnalysisResponse,
    LogCreatedResponse,
    MealLogCreate,
    NutritionLog,
)
from zenithfit.services import s3_service
from zenithfit.services.ai_service import AIService, AIServiceError
from zenithfit.services.nutrition_service import (
    build_log,
    from_analysis,
    logs_for_day,
    prepend_log,
    tally,
    today_key,
)
from zenithfit.services.persistence import persist

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/logs", response_model=List[NutritionLog])
async def list_logs(day: Optional[str] = None, store: DocumentStore = Depends(get_document_store)):
    """The whole journal, newest first, optionally narrowed to one ISO day prefix."""
    logs = await store.get_nutrition_logs()
    return logs_for_day(logs, day) if day else logs


@router.get("/summary", response_model=DailySummary)
async def daily_summary(day: Optional[str] = None, store: DocumentStore = Depends(get_document_store)):
    day = day or today_key()
    logs = await store.get_nutrition_logs()
    profile = await store.get_profile()
    return DailySummary(
        day=day,
        totals=tally(logs, day),
        targets=profile.macro_targets if profile else None,
        logs=logs_for_day(logs, day),
    )


@router.post("/logs", response_model=LogCreatedResponse, status_code=201)
async def add_log(
    data: MealLogCreate,
    store: DocumentStore = Depends(get_document_store),
    ai: AIService = Depends(get_ai_service),
):
    """Add a meal to the journal; meals without a photo get a generated one when possible."""
    image_url = data.image_url
    named = data.meal_name.strip() not in ("", DEFAULT_MEAL_NAME)
    if not image_url and data.generate_image and named:
        try:
            image_url = await ai.generate_food_image(data.meal_name)
        except AIServiceError as e:
            logger.warning("Meal image generation failed for %r: %s", data.meal_name, e)

    log = build_log(data, image_url=image_url)
    logs = prepend_log(await store.get_nutrition_logs(), log)
    saved = await persist(store, "nutrition journal", store.save_nutrition_logs(logs))
    return LogCreatedResponse(log=log, persisted=saved)


@router.post("/analyze", response_model=FoodAnalysisResponse)
async def analyze_photo(
    image: UploadFile = File(...),
    store: DocumentStore = Depends(get_document_store),
    ai: AIService = Depends(get_ai_service),
):
    """Estimate meal name and macros from a photo. Nothing is logged until the client confirms."""
    content = await s3_service.read_image(image)

    try:
        analysis = await ai.analyze_food_image(content, image.content_type)
    except AIServiceError as e:
        logger.error("Food image analysis failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not analyze this photo")

    image_url = None
    if settings.STORE_MEAL_PHOTOS:
        try:
            key = await s3_service.upload_meal_photo(store.user_id, image, content)
            image_url = await s3_service.generate_presigned_url(key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Meal photo upload failed: %s", e)

    draft = from_analysis(analysis)
    draft.image_url = image_url
    draft.generate_image = image_url is None
    return FoodAnalysisResponse(analysis=analysis, image_url=image_url, draft=draft)
