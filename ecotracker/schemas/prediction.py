"""Forecast schemas."""

import uuid

from pydantic import Field

from ecotracker.schemas.common import CamelModel, UtcDatetime


class PredictionGenerateRequest(CamelModel):
    type: str = Field(default="air_quality", min_length=1, max_length=50)


class PredictionResponse(CamelModel):
    id: uuid.UUID
    device_id: uuid.UUID
    prediction_type: str
    predicted_value: float
    confidence: float
    prediction_for: UtcDatetime
    model_version: str
    created_at: UtcDatetime


class FeatureImportance(CamelModel):
    feature: str
    importance: float


class ModelPerformance(CamelModel):
    accuracy: float
    precision: float
    recall: float
    last_trained: UtcDatetime
    training_samples: int


class ModelInfoResponse(CamelModel):
    """Static description of the forecasting model."""

    model_version: str
    feature_importance: list[FeatureImportance]
    performance: ModelPerformance
