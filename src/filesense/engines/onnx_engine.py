"""ONNX Runtime inference engine."""

import logging
import time
from pathlib import Path

import numpy as np
import onnxruntime as ort

from filesense.exceptions import InferenceError, ModelLoadError

logger = logging.getLogger(__name__)


class OnnxInferenceEngine:
    """Inference engine backed by an ONNX Runtime session.

    The model takes one input tensor named ``bytes`` and produces one output
    tensor named ``target_label``. An InferenceSession supports concurrent
    ``run`` calls, so one engine can serve several worker threads.
    """

    INPUT_NAME = "bytes"
    OUTPUT_NAME = "target_label"

    def __init__(
        self,
        model_path: Path | str | None = None,
        model_bytes: bytes | None = None,
        model_name: str | None = None,
        providers: list[str] | None = None,
    ):
        """Initialize the engine.

        Args:
            model_path: Path to the ``.onnx`` model file.
            model_bytes: Serialized model, used instead of model_path.
            model_name: Name reported for the model. Defaults to the
                       name of the directory holding the model.
            providers: ONNX Runtime execution providers.
                       Defaults to CPUExecutionProvider.
        """
        if model_path is None and model_bytes is None:
            raise ModelLoadError("No model path or model bytes given")
        self._model_path = Path(model_path) if model_path is not None else None
        self._model_bytes = model_bytes
        self._model_name = model_name or (
            self._model_path.parent.name if self._model_path is not None else "in-memory"
        )
        self._providers = providers or ["CPUExecutionProvider"]
        self._session: ort.InferenceSession | None = None
        self._closed = False

    @property
    def session(self) -> ort.InferenceSession:
        """Lazy-load the session on first access."""
        if self._closed:
            raise InferenceError("Inference engine has been closed")
        if self._session is None:
            self._session = self._create_session()
        return self._session

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        return self._model_name

    def load(self) -> None:
        """Create the session now instead of on first use."""
        _ = self.session

    def run(self, batch: np.ndarray) -> np.ndarray:
        """Score a batch of feature rows.

        Args:
            batch: float32 array of shape (rows, input_column_size)

        Returns:
            numpy array of shape (rows, num_labels)
        """
        try:
            (scores,) = self.session.run(
                [self.OUTPUT_NAME], {self.INPUT_NAME: batch.astype(np.float32, copy=False)}
            )
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Model inference failed: {e}") from e
        return np.asarray(scores)

    def close(self) -> None:
        self._session = None
        self._closed = True

    def _create_session(self) -> ort.InferenceSession:
        source = self._model_bytes if self._model_bytes is not None else str(self._model_path)
        if self._model_path is not None and self._model_bytes is None and not self._model_path.exists():
            raise ModelLoadError(f"Model file not found: {self._model_path}")

        start = time.perf_counter()
        try:
            session = ort.InferenceSession(source, providers=self._providers)
        except Exception as e:
            raise ModelLoadError(f"Cannot load ONNX model {self._model_name}: {e}") from e
        logger.debug(f"ONNX model loaded in {time.perf_counter() - start:.3f} seconds")
        return session
