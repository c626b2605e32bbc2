"""Turn a raw model prediction into the label returned to the user."""

import logging

from filesense.content_types import ContentTypesManager
from filesense.models import PredictionMode
from filesense.models.content_type import GENERIC_TEXT, UNKNOWN

logger = logging.getLogger(__name__)


class DecisionPolicy:
    """Confidence policy selected by a PredictionMode.

    When the model is not trusted, the output falls back to ``txt`` or
    ``unknown`` based on whether the predicted label is tagged as text. This
    assumes the model got text vs. binary right even when it is unsure about
    the specific type, and it avoids reading the file bytes again.
    """

    def __init__(
        self,
        prediction_mode: PredictionMode,
        content_types: ContentTypesManager,
        thresholds: dict[str, float],
        overwrite_map: dict[str, str],
        medium_confidence_threshold: float = 0.5,
    ):
        self.prediction_mode = prediction_mode
        self._ctm = content_types
        self._overwrite_map = dict(overwrite_map)
        self._medium_threshold = medium_confidence_threshold
        # HIGH_CONFIDENCE must never accept what MEDIUM_CONFIDENCE rejects
        self._high_thresholds = {
            label: max(threshold, medium_confidence_threshold)
            for label, threshold in thresholds.items()
        }
        lowered = sorted(label for label, t in thresholds.items() if t < medium_confidence_threshold)
        if lowered:
            logger.debug(f"Raised high-confidence thresholds to {medium_confidence_threshold} for: {lowered}")

    def overwrite(self, dl_ct_label: str) -> str:
        return self._overwrite_map.get(dl_ct_label, dl_ct_label)

    def high_confidence_threshold(self, label: str) -> float:
        return self._high_thresholds.get(label, self._medium_threshold)

    def accepts(self, label: str, score: float) -> bool:
        """Whether the model prediction (already overwritten) is trusted as is."""
        if self.prediction_mode == PredictionMode.BEST_GUESS:
            return True
        if self.prediction_mode == PredictionMode.HIGH_CONFIDENCE:
            return score >= self.high_confidence_threshold(label)
        return score >= self._medium_threshold

    def decide(self, dl_ct_label: str, score: float) -> str:
        """Return the output label for a raw model label and score."""
        label = self.overwrite(dl_ct_label)
        if self.accepts(label, score):
            return label
        return GENERIC_TEXT if self._ctm.is_text(label) else UNKNOWN
