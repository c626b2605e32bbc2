"""Core data models for features, model outputs and identification results."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class PredictionMode(str, Enum):
    """How strictly the model's confidence is trusted."""

    BEST_GUESS = "best-guess"
    MEDIUM_CONFIDENCE = "medium-confidence"
    HIGH_CONFIDENCE = "high-confidence"

    @classmethod
    def from_string(cls, value: str) -> "PredictionMode":
        """Parse a CLI-style mode name (``high-confidence``, ``HIGH_CONFIDENCE``...)."""
        normalized = value.strip().lower().replace("_", "-")
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid prediction mode: {value!r} (valid: {valid})")


@dataclass(frozen=True)
class Features:
    """Fixed-length integer windows sampled from the beginning, middle and end."""

    beg: tuple[int, ...]
    mid: tuple[int, ...]
    end: tuple[int, ...]


@dataclass(frozen=True)
class ModelOutput:
    """Top prediction of the model for a single sample."""

    ct_label: str
    score: float


@dataclass(frozen=True)
class ModelOutputFields:
    """Raw model prediction. Every field is None when inference was skipped."""

    ct_label: Optional[str] = None
    score: Optional[float] = None
    group: Optional[str] = None
    mime_type: Optional[str] = None
    magic: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class MagikaOutputFields:
    """Final prediction returned to the user."""

    ct_label: str
    score: float
    group: str
    mime_type: str
    magic: str
    description: str


@dataclass(frozen=True)
class MagikaResult:
    """Identification result for one path (or ``-`` for in-memory content)."""

    path: str
    dl: ModelOutputFields
    output: MagikaOutputFields

    @property
    def prediction_skipped(self) -> bool:
        """True when the output was decided without running the model."""
        return self.dl.ct_label is None

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "path": self.path,
            "dl": asdict(self.dl),
            "output": asdict(self.output),
        }
