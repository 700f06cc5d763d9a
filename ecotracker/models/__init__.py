# Database Models
from ecotracker.models.alert import Alert, AlertSeverity, MetricType
from ecotracker.models.base import Base, TimestampMixin
from ecotracker.models.device import Device
from ecotracker.models.prediction import Prediction
from ecotracker.models.sensor_reading import SensorReading
from ecotracker.models.user import User

__all__ = [
    "Alert",
    "AlertSeverity",
    "Base",
    "Device",
    "MetricType",
    "Prediction",
    "SensorReading",
    "TimestampMixin",
    "User",
]
