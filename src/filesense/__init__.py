"""filesense - content-type identification with a byte-level deep learning model."""

from filesense.exceptions import ContentTypeError, FileSenseError, InferenceError, ModelLoadError
from filesense.magika import Magika
from filesense.models import MagikaResult, PredictionMode

__version__ = "0.1.0"

__all__ = [
    "ContentTypeError",
    "FileSenseError",
    "InferenceError",
    "Magika",
    "MagikaResult",
    "ModelLoadError",
    "PredictionMode",
    "__version__",
]
