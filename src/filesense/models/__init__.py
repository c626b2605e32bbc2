"""Data models for filesense."""

from filesense.models.content_type import ContentType
from filesense.models.result import (
    Features,
    MagikaOutputFields,
    MagikaResult,
    ModelOutput,
    ModelOutputFields,
    PredictionMode,
)

__all__ = [
    "ContentType",
    "Features",
    "MagikaOutputFields",
    "MagikaResult",
    "ModelOutput",
    "ModelOutputFields",
    "PredictionMode",
]
