"""Threshold alert schemas."""

import uuid

from ecotracker.models.alert import AlertSeverity, MetricType
from ecotracker.schemas.common import CamelModel, UtcDatetime


class AlertResponse(CamelModel):
    id: uuid.UUID
    device_id: uuid.UUID
    metric_type: MetricType
    severity: AlertSeverity
    title: str
    message: str
    value: float
    threshold: float
    is_read: bool
    created_at: UtcDatetime
