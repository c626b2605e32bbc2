"""Batched inference over extracted features."""

import logging
import time
from collections.abc import Hashable, Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from filesense.config import ModelConfig
from filesense.exceptions import InferenceError
from filesense.models import Features, ModelOutput
from filesense.protocols import InferenceEngine

logger = logging.getLogger(__name__)


class BatchInferenceOrchestrator:
    """Runs the inference engine over many feature vectors at once.

    Rows are split into sub-batches of at most ``max_internal_batch_size``
    to bound the size of each tensor handed to the engine. With
    ``max_workers > 1`` sub-batches are scored concurrently; results are
    still collected in input order.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        model_config: ModelConfig,
        max_internal_batch_size: int = 1000,
        max_workers: int = 1,
    ):
        if max_internal_batch_size <= 0:
            raise ValueError("max_internal_batch_size must be positive")
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.engine = engine
        self.model_config = model_config
        self.max_internal_batch_size = max_internal_batch_size
        self.max_workers = max_workers

    def build_matrix(self, features: Sequence[Features]) -> np.ndarray:
        """Stack features into a float32 matrix of shape (n, input_column_size)."""
        cfg = self.model_config
        rows = []
        for f in features:
            row: list[int] = []
            if cfg.beg_size > 0:
                row.extend(f.beg[: cfg.beg_size])
            if cfg.mid_size > 0:
                row.extend(f.mid[: cfg.mid_size])
            if cfg.end_size > 0:
                row.extend(f.end[-cfg.end_size :])
            assert len(row) == cfg.input_column_size, "feature lengths do not match the model config"
            rows.append(row)
        return np.array(rows, dtype=np.float32).reshape(len(rows), cfg.input_column_size)

    def raw_predictions(self, matrix: np.ndarray) -> np.ndarray:
        """Score a matrix sub-batch by sub-batch. Returns (n, num_labels)."""
        num_labels = self.model_config.output_column_size
        if len(matrix) == 0:
            return np.empty((0, num_labels), dtype=np.float32)

        step = self.max_internal_batch_size
        batches = [matrix[i : i + step] for i in range(0, len(matrix), step)]

        start = time.perf_counter()
        if self.max_workers > 1 and len(batches) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                # map() yields in submission order
                scores = list(executor.map(self._run_batch, batches))
        else:
            scores = [self._run_batch(batch) for batch in batches]
        logger.debug(
            f"Model inference on {len(matrix)} samples ({len(batches)} batches) "
            f"in {time.perf_counter() - start:.3f} seconds"
        )
        return np.concatenate(scores, axis=0)

    def decode(self, raw_predictions: np.ndarray) -> list[ModelOutput]:
        """Pick the top label of each row. Ties go to the leftmost column."""
        labels = self.model_config.target_labels_space
        top_idxs = np.argmax(raw_predictions, axis=1)
        scores = raw_predictions[np.arange(len(raw_predictions)), top_idxs]
        return [
            ModelOutput(ct_label=labels[int(idx)], score=float(score))
            for idx, score in zip(top_idxs, scores)
        ]

    def predict(self, items: Sequence[tuple[Hashable, Features]]) -> dict[Hashable, ModelOutput]:
        """Return the top prediction for every (identifier, features) pair."""
        if not items:
            return {}

        start = time.perf_counter()
        matrix = self.build_matrix([features for _, features in items])
        logger.debug(f"Model input prepared in {time.perf_counter() - start:.3f} seconds")

        outputs = self.decode(self.raw_predictions(matrix))
        return {identifier: output for (identifier, _), output in zip(items, outputs)}

    def _run_batch(self, batch: np.ndarray) -> np.ndarray:
        try:
            scores = np.asarray(self.engine.run(batch))
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Inference engine failed: {e}") from e
        expected = (len(batch), self.model_config.output_column_size)
        if scores.shape != expected:
            raise InferenceError(f"Model returned shape {scores.shape}, expected {expected}")
        return scores
