"""Forecast router.

Stored predictions per device and type, on-demand generation, and the
static model description shown on the predictions page.
"""

import uuid

from fastapi import APIRouter, Body, Depends

from ecotracker.config import settings
from ecotracker.core.auth import CurrentUser
from ecotracker.logging_config import get_logger
from ecotracker.schemas.prediction import (
    ModelInfoResponse,
    PredictionGenerateRequest,
    PredictionResponse,
)
from ecotracker.services.forecasting import (
    MODEL_VERSION,
    feature_importance,
    model_performance,
)
from ecotracker.services.pipeline import SensorPipeline, get_pipeline
from ecotracker.services.storage import SensorStorage, get_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/api/predictions", tags=["predictions"])


@router.get("/model", response_model=ModelInfoResponse)
async def get_model_info(user: CurrentUser) -> ModelInfoResponse:
    """Feature importance and evaluation figures for the current model."""
    return ModelInfoResponse(
        model_version=MODEL_VERSION,
        feature_importance=feature_importance(),
        performance=model_performance(),
    )


@router.get("/{device_id}/{prediction_type}", response_model=list[PredictionResponse])
async def get_predictions(
    device_id: uuid.UUID,
    prediction_type: str,
    user: CurrentUser,
    storage: SensorStorage = Depends(get_storage),
) -> list[PredictionResponse]:
    """Latest 24 stored predictions of ``prediction_type`` for the device."""
    await storage.get_owned_device(device_id, user.id)
    predictions = await storage.latest_predictions(device_id, prediction_type)
    return [PredictionResponse.model_validate(p) for p in predictions]


@router.post("/{device_id}/generate", response_model=list[PredictionResponse])
async def generate_predictions(
    device_id: uuid.UUID,
    user: CurrentUser,
    body: PredictionGenerateRequest | None = Body(default=None),
    pipeline: SensorPipeline = Depends(get_pipeline),
) -> list[PredictionResponse]:
    """Forecast the next hours for the device and store the result."""
    await pipeline.storage.get_owned_device(device_id, user.id)
    prediction_type = body.type if body is not None else "air_quality"

    predictions = await pipeline.generate_forecast(
        device_id,
        prediction_type,
        horizon_hours=settings.forecast_horizon_hours,
        history_days=settings.forecast_history_days,
    )
    logger.info(
        "Predictions generated on request",
        user_id=str(user.id),
        device_id=str(device_id),
        prediction_type=prediction_type,
    )
    return [PredictionResponse.model_validate(p) for p in predictions]
