"""Shared fixtures: a deterministic in-memory engine instead of the ONNX model."""

from __future__ import annotations

import numpy as np
import pytest

from filesense import Magika
from filesense.config import MODEL_DIR_ENV_VAR, ModelConfig
from filesense.content_types import ContentTypesManager
from filesense.models import PredictionMode


class FakeEngine:
    """Scores every row with one fixed label, or a label picked by its first byte.

    Args:
        labels: Target label space, one column per label
        label: Label returned for rows not matched by ``by_first_byte``
        score: Score given to the returned label
        by_first_byte: Maps the first feature of a row to (label, score)
    """

    def __init__(
        self,
        labels: tuple[str, ...],
        label: str = "txt",
        score: float = 0.99,
        by_first_byte: dict[int, tuple[str, float]] | None = None,
    ) -> None:
        self.labels = tuple(labels)
        self.label = label
        self.score = score
        self.by_first_byte = by_first_byte or {}
        self.load_calls = 0
        self.close_calls = 0
        self.batch_sizes: list[int] = []
        self.inputs: list[np.ndarray] = []

    @property
    def model_name(self) -> str:
        return "fake"

    def load(self) -> None:
        self.load_calls += 1

    def run(self, batch: np.ndarray) -> np.ndarray:
        self.batch_sizes.append(len(batch))
        self.inputs.append(batch.copy())
        num_labels = len(self.labels)
        scores = np.zeros((len(batch), num_labels), dtype=np.float32)
        for i, row in enumerate(batch):
            label, score = self.by_first_byte.get(int(row[0]), (self.label, self.score))
            scores[i, :] = (1.0 - score) / (num_labels - 1)
            scores[i, self.labels.index(label)] = score
        return scores

    def close(self) -> None:
        self.close_calls += 1

    @property
    def rows_seen(self) -> int:
        return sum(self.batch_sizes)


@pytest.fixture(autouse=True)
def no_model_dir_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(MODEL_DIR_ENV_VAR, raising=False)


@pytest.fixture(scope="session")
def model_config() -> ModelConfig:
    return ModelConfig.load_default()


@pytest.fixture(scope="session")
def content_types() -> ContentTypesManager:
    return ContentTypesManager.load_default()


@pytest.fixture
def fake_engine(model_config: ModelConfig) -> FakeEngine:
    return FakeEngine(model_config.target_labels_space)


@pytest.fixture
def make_magika(model_config: ModelConfig, content_types: ContentTypesManager):
    """Factory for Magika instances backed by a FakeEngine. Closed at teardown."""
    created: list[Magika] = []

    def factory(
        engine: FakeEngine | None = None,
        prediction_mode: PredictionMode = PredictionMode.HIGH_CONFIDENCE,
        **kwargs,
    ) -> Magika:
        magika = Magika(
            engine=engine or FakeEngine(model_config.target_labels_space),
            model_config=model_config,
            content_types=content_types,
            prediction_mode=prediction_mode,
            **kwargs,
        )
        created.append(magika)
        return magika

    yield factory
    for magika in created:
        magika.close()


@pytest.fixture
def magika(make_magika, fake_engine: FakeEngine) -> Magika:
    return make_magika(engine=fake_engine)
