import json
from pathlib import Path

import pytest

from filesense.config import (
    MODEL_DIR_ENV_VAR,
    MagikaConfig,
    ModelConfig,
    load_model_config,
    resolve_model_dir,
)
from filesense.exceptions import ModelLoadError


def test_default_config_values() -> None:
    config = MagikaConfig()
    assert config.default_model_name == "standard_v1"
    assert config.medium_confidence_threshold == 0.5
    assert config.min_file_size_for_dl == 16
    assert config.padding_token == 256
    assert config.block_size == 4096


def test_bundled_model_config(model_config) -> None:
    assert model_config.name == "standard_v1"
    assert model_config.input_column_size == 1536
    assert model_config.output_column_size == len(model_config.target_labels_space)
    assert model_config.model_output_overwrite_map["randombytes"] == "unknown"


def test_from_dict_rejects_bad_configs() -> None:
    with pytest.raises(ModelLoadError):
        ModelConfig.from_dict({"input_sizes": {"beg": 512, "mid": 512, "end": 512}})
    with pytest.raises(ModelLoadError, match="empty"):
        ModelConfig.from_dict(
            {"target_labels_space": [], "input_sizes": {"beg": 1, "mid": 1, "end": 1}}
        )
    with pytest.raises(ModelLoadError, match="between"):
        ModelConfig.from_dict(
            {"target_labels_space": ["a"], "input_sizes": {"beg": 1024, "mid": 1, "end": 1}}
        )


def test_model_config_next_to_model_wins(tmp_path: Path) -> None:
    model_dir = tmp_path / "my_model"
    model_dir.mkdir()
    (model_dir / "config.json").write_text(
        json.dumps(
            {
                "target_labels_space": ["a", "b"],
                "input_sizes": {"beg": 8, "mid": 0, "end": 8},
                "thresholds": {"a": 0.7},
            }
        ),
        encoding="utf-8",
    )

    config = load_model_config(model_dir, "standard_v1")

    assert config.name == "my_model"
    assert config.target_labels_space == ("a", "b")
    assert config.input_column_size == 16
    assert config.thresholds == {"a": 0.7}


def test_bundled_config_without_model_dir() -> None:
    assert load_model_config(None, "standard_v1").name == "standard_v1"


def test_model_dir_requires_its_own_config(tmp_path: Path) -> None:
    (tmp_path / "model.onnx").write_bytes(b"weights")
    with pytest.raises(ModelLoadError, match="config.json"):
        load_model_config(tmp_path, "standard_v1")


def test_resolve_model_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    assert resolve_model_dir(None) is None
    monkeypatch.setenv(MODEL_DIR_ENV_VAR, str(tmp_path))
    assert resolve_model_dir(None) == tmp_path
    assert resolve_model_dir("elsewhere") == Path("elsewhere")
