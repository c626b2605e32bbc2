"""Process constants and model configuration.

Nothing here is global state: a ``Magika`` instance receives its own
``MagikaConfig`` and ``ModelConfig`` objects, so several differently
configured pipelines can live in the same process.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from filesense.exceptions import ModelLoadError

logger = logging.getLogger(__name__)

MODEL_DIR_ENV_VAR = "FILESENSE_MODEL_DIR"
MODEL_FILE_NAME = "model.onnx"
MODEL_CONFIG_FILE_NAME = "config.json"
CONTENT_TYPES_FILE_NAME = "content_types_config.json"

MAX_WINDOW_SIZE = 512


@dataclass(frozen=True)
class MagikaConfig:
    """Constants shared by every stage of the pipeline."""

    default_model_name: str = "standard_v1"
    # Minimum score for MEDIUM_CONFIDENCE predictions
    medium_confidence_threshold: float = 0.5
    # Inputs this small are never sent to the model
    min_file_size_for_dl: int = 16
    padding_token: int = 256
    block_size: int = 4096
    max_internal_batch_size: int = 1000


@dataclass(frozen=True)
class ModelConfig:
    """Configuration shipped alongside a trained model.

    Attributes:
        target_labels_space: Label for each column of the model output.
        thresholds: Per-label minimum score for HIGH_CONFIDENCE predictions.
        model_output_overwrite_map: Raw labels rewritten before any threshold logic.
        input_sizes: Window sizes keyed by ``beg``, ``mid`` and ``end``.
        dataset_format: Encoding the model was trained with.
    """

    target_labels_space: tuple[str, ...]
    thresholds: dict[str, float] = field(default_factory=dict)
    model_output_overwrite_map: dict[str, str] = field(default_factory=dict)
    input_sizes: dict[str, int] = field(
        default_factory=lambda: {"beg": 512, "mid": 512, "end": 512}
    )
    dataset_format: str = "int-concat/one-hot"
    name: str = "standard_v1"

    @property
    def beg_size(self) -> int:
        return self.input_sizes["beg"]

    @property
    def mid_size(self) -> int:
        return self.input_sizes["mid"]

    @property
    def end_size(self) -> int:
        return self.input_sizes["end"]

    @property
    def input_column_size(self) -> int:
        return self.beg_size + self.mid_size + self.end_size

    @property
    def output_column_size(self) -> int:
        return len(self.target_labels_space)

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str = "standard_v1") -> "ModelConfig":
        """Validate and build a ModelConfig from its JSON representation."""
        try:
            labels = tuple(data["target_labels_space"])
            input_sizes = {k: int(data["input_sizes"][k]) for k in ("beg", "mid", "end")}
        except (KeyError, TypeError, ValueError) as e:
            raise ModelLoadError(f"Malformed model config: {e}") from e

        if not labels:
            raise ModelLoadError("Model config has an empty target label space")
        for key, size in input_sizes.items():
            if not 0 <= size <= MAX_WINDOW_SIZE:
                raise ModelLoadError(
                    f"Input size for '{key}' must be between 0 and {MAX_WINDOW_SIZE}, got {size}"
                )

        return cls(
            target_labels_space=labels,
            thresholds={k: float(v) for k, v in (data.get("thresholds") or {}).items()},
            model_output_overwrite_map=dict(data.get("model_output_overwrite_map") or {}),
            input_sizes=input_sizes,
            dataset_format=data.get("dataset_format", "int-concat/one-hot"),
            name=name,
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "ModelConfig":
        """Load a model config JSON file. The model name is its parent directory."""
        config_path = Path(path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ModelLoadError(f"Cannot read model config {config_path}: {e}") from e
        logger.debug(f"Loaded model config from {config_path}")
        return cls.from_dict(data, name=config_path.parent.name)

    @classmethod
    def load_default(cls, model_name: str = "standard_v1") -> "ModelConfig":
        """Load the model config bundled with the package."""
        resource = resources.files("filesense").joinpath("data", model_name, MODEL_CONFIG_FILE_NAME)
        try:
            data = json.loads(resource.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ModelLoadError(f"Cannot read bundled config for model '{model_name}': {e}") from e
        return cls.from_dict(data, name=model_name)


def resolve_model_dir(model_dir: Path | str | None = None) -> Path | None:
    """Return the model directory, falling back to $FILESENSE_MODEL_DIR."""
    if model_dir is not None:
        return Path(model_dir)
    env_value = os.environ.get(MODEL_DIR_ENV_VAR)
    return Path(env_value) if env_value else None


def load_model_config(model_dir: Path | None, default_model_name: str) -> ModelConfig:
    """Load the config shipped next to the model.

    The bundled config is only used when no model directory is given,
    i.e. when the caller injects its own engine.
    """
    if model_dir is None:
        return ModelConfig.load_default(default_model_name)
    config_path = model_dir / MODEL_CONFIG_FILE_NAME
    if not config_path.is_file():
        raise ModelLoadError(f"Model directory {model_dir} has no {MODEL_CONFIG_FILE_NAME}")
    return ModelConfig.from_file(config_path)
