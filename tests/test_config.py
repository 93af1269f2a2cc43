"""Tests for QualityGateConfig defaults and file loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from conftest import FIXTURES_DIR
from fittoday.config import QualityGateConfig


def test_defaults():
    config = QualityGateConfig()

    assert config.minimum_structural_diversity == 0.25
    assert config.max_history_comparisons == 3
    assert config.minimum_exercise_uniqueness == 0.80
    assert (
        config.exercise_overlap_weight,
        config.order_similarity_weight,
        config.phase_structure_weight,
    ) == (0.5, 0.3, 0.2)
    assert config.sets_tolerance == 1
    assert config.reps_tolerance == 3
    assert config.min_rest_seconds == 10
    assert config.feedback_issue_limit == 3


def test_weights_must_sum_to_one():
    with pytest.raises(ValidationError, match="sum to 1.0"):
        QualityGateConfig(exercise_overlap_weight=0.7)


def test_thresholds_bounded():
    with pytest.raises(ValidationError):
        QualityGateConfig(minimum_structural_diversity=1.5)
    with pytest.raises(ValidationError):
        QualityGateConfig(max_history_comparisons=0)


def test_from_file_partial_overrides():
    config = QualityGateConfig.from_file(FIXTURES_DIR / "quality_gate_config.json")

    assert config.minimum_structural_diversity == 0.3
    assert config.max_history_comparisons == 5
    assert config.minimum_exercise_uniqueness == 0.6
    assert config.feedback_issue_limit == 2
    # Unspecified fields keep their defaults
    assert config.sets_tolerance == 1


def test_from_file_accepts_str_path():
    config = QualityGateConfig.from_file(str(FIXTURES_DIR / "quality_gate_config.json"))
    assert config.max_history_comparisons == 5


def test_from_file_missing():
    with pytest.raises(FileNotFoundError):
        QualityGateConfig.from_file(Path("does/not/exist.json"))


def test_from_file_bad_weights():
    with pytest.raises(ValueError, match="Invalid config file"):
        QualityGateConfig.from_file(FIXTURES_DIR / "invalid_weights_config.json")


def test_from_file_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(ValueError, match="Invalid config JSON"):
        QualityGateConfig.from_file(path)


def test_from_file_not_an_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[0.5, 0.3, 0.2]")

    with pytest.raises(ValueError, match="expected a JSON object"):
        QualityGateConfig.from_file(path)
