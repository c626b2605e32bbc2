"""The identification pipeline: fast path, features, batched inference, policy."""

import logging
import os
import time
from pathlib import Path
from typing import Optional, Sequence

from filesense.config import (
    MODEL_DIR_ENV_VAR,
    MODEL_FILE_NAME,
    MagikaConfig,
    ModelConfig,
    load_model_config,
    resolve_model_dir,
)
from filesense.content_types import ContentTypesManager
from filesense.engines import OnnxInferenceEngine
from filesense.exceptions import InferenceError, ModelLoadError
from filesense.features import FeatureExtractor
from filesense.models import MagikaResult, ModelOutput, PredictionMode
from filesense.pipeline import (
    BatchInferenceOrchestrator,
    DecisionPolicy,
    FastPathClassifier,
    FastPathDecision,
    ResultComposer,
)
from filesense.protocols import InferenceEngine
from filesense.utils.paths import STDIN_PATH

logger = logging.getLogger(__name__)


class Magika:
    """Identifies the content type of files and byte buffers.

    One instance holds the loaded model and the content-type table and is
    meant to be reused for many calls. Close it (or use it as a context
    manager) once the last call has returned.

    Args:
        model_dir: Directory with ``model.onnx`` and its ``config.json``.
                   Defaults to $FILESENSE_MODEL_DIR.
        engine: Inference engine to use instead of loading model_dir.
        model_config: Model configuration. Defaults to model_dir/config.json,
                      or the bundled one when no model_dir is given.
        content_types: Content-type table. Defaults to the bundled one.
        prediction_mode: How strictly model scores are trusted.
        no_dereference: Report symlinks instead of following them.
        verbose: Log at INFO level.
        debug: Log at DEBUG level.
        max_workers: Threads used to score sub-batches concurrently.
        config: Pipeline constants.
    """

    def __init__(
        self,
        model_dir: Path | str | None = None,
        *,
        engine: Optional[InferenceEngine] = None,
        model_config: Optional[ModelConfig] = None,
        content_types: Optional[ContentTypesManager] = None,
        prediction_mode: PredictionMode = PredictionMode.HIGH_CONFIDENCE,
        no_dereference: bool = False,
        verbose: bool = False,
        debug: bool = False,
        max_workers: int = 1,
        config: Optional[MagikaConfig] = None,
    ):
        package_logger = logging.getLogger("filesense")
        if debug:
            package_logger.setLevel(logging.DEBUG)
        elif verbose:
            package_logger.setLevel(logging.INFO)

        self.config = config or MagikaConfig()
        self.prediction_mode = prediction_mode
        self.no_dereference = no_dereference

        resolved_dir = resolve_model_dir(model_dir)
        self.model_config = model_config or load_model_config(
            resolved_dir, self.config.default_model_name
        )
        self.content_types = content_types or ContentTypesManager.load_default()
        self._engine = engine or self._load_engine(resolved_dir, self.model_config.name)
        self._closed = False

        try:
            self._engine.load()
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(f"Cannot load inference engine: {e}") from e

        cfg = self.config
        self._extractor = FeatureExtractor(
            beg_size=self.model_config.beg_size,
            mid_size=self.model_config.mid_size,
            end_size=self.model_config.end_size,
            padding_token=cfg.padding_token,
            block_size=cfg.block_size,
        )
        self._fast_path = FastPathClassifier(
            self._extractor,
            min_file_size_for_dl=cfg.min_file_size_for_dl,
            no_dereference=no_dereference,
        )
        self._orchestrator = BatchInferenceOrchestrator(
            self._engine,
            self.model_config,
            max_internal_batch_size=cfg.max_internal_batch_size,
            max_workers=max_workers,
        )
        self._policy = DecisionPolicy(
            prediction_mode,
            self.content_types,
            thresholds=self.model_config.thresholds,
            overwrite_map=self.model_config.model_output_overwrite_map,
            medium_confidence_threshold=cfg.medium_confidence_threshold,
        )
        self._composer = ResultComposer(self.content_types)

    @staticmethod
    def get_default_model_name() -> str:
        """Return the default model name, without loading anything."""
        return MagikaConfig().default_model_name

    def get_model_name(self) -> str:
        return self.model_config.name

    def identify_path(self, path: str | os.PathLike) -> MagikaResult:
        """Identify a single path."""
        return self.identify_paths([path])[0]

    def identify_paths(self, paths: Sequence[str | os.PathLike]) -> list[MagikaResult]:
        """Identify several paths. Results are in the same order as paths.

        Paths are triaged first; the ones that need the model are scored
        together in batches.
        """
        self._check_open()
        start = time.perf_counter()

        results: list[Optional[MagikaResult]] = [None] * len(paths)
        pending = []
        for idx, path in enumerate(paths):
            path_str = os.fspath(path)
            if not path_str.strip():
                raise ValueError("Empty path")
            triage = self._fast_path.classify_path(path_str)
            if isinstance(triage, FastPathDecision):
                results[idx] = self._result_from_decision(path_str, triage)
            else:
                pending.append((idx, triage.features))
        logger.debug(
            f"First pass and features extracted for {len(paths)} samples "
            f"in {time.perf_counter() - start:.3f} seconds"
        )

        for idx, model_output in self._orchestrator.predict(pending).items():
            results[idx] = self._result_from_model_output(os.fspath(paths[idx]), model_output)

        return results  # type: ignore[return-value]

    def identify_bytes(self, content: bytes) -> MagikaResult:
        """Identify an in-memory buffer. The result path is ``-``."""
        self._check_open()
        triage = self._fast_path.classify_bytes(content)
        if isinstance(triage, FastPathDecision):
            return self._result_from_decision(STDIN_PATH, triage)
        model_output = self._orchestrator.predict([(STDIN_PATH, triage.features)])[STDIN_PATH]
        return self._result_from_model_output(STDIN_PATH, model_output)

    identify = identify_path
    identify_many = identify_paths

    def close(self) -> None:
        """Release the inference engine. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._engine.close()
        logger.debug("Inference engine closed")

    def __enter__(self) -> "Magika":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise InferenceError("Magika instance has been closed")

    def _result_from_decision(self, path: str, decision: FastPathDecision) -> MagikaResult:
        return self._composer.compose(
            path,
            dl_ct_label=None,
            score=1.0,
            output_ct_label=decision.label,
            link_target=decision.link_target,
        )

    def _result_from_model_output(self, path: str, model_output: ModelOutput) -> MagikaResult:
        # The result keeps both the raw model label and the final one
        output_ct_label = self._policy.decide(model_output.ct_label, model_output.score)
        return self._composer.compose(
            path,
            dl_ct_label=model_output.ct_label,
            score=model_output.score,
            output_ct_label=output_ct_label,
        )

    @staticmethod
    def _load_engine(model_dir: Optional[Path], model_name: str) -> OnnxInferenceEngine:
        if model_dir is None:
            raise ModelLoadError(
                f"No model directory given: pass model_dir or set ${MODEL_DIR_ENV_VAR}"
            )
        return OnnxInferenceEngine(model_dir / MODEL_FILE_NAME, model_name=model_name)
