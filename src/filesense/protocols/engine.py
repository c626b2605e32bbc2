"""Protocol for inference engines."""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class InferenceEngine(Protocol):
    """Protocol for the opaque classifier behind the pipeline.

    An engine consumes a float32 matrix of shape (rows, input_column_size)
    and returns a score matrix of shape (rows, num_labels). Allows swapping
    ONNX Runtime for another runtime, or for a fake in tests.
    """

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    def load(self) -> None:
        """Load the model now instead of on first use. Idempotent."""
        ...

    def run(self, batch: np.ndarray) -> np.ndarray:
        """Score a batch.

        Returns: numpy array of shape (len(batch), num_labels)
        """
        ...

    def close(self) -> None:
        """Release the model. Idempotent."""
        ...
