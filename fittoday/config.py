"""
Quality gate configuration.

Thresholds and tolerances used by the validator, normalizer, diversity gate
and retry feedback. Every component accepts an optional config and falls back
to these defaults.
"""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator


class QualityGateConfig(BaseModel):
    """Tunable thresholds for the workout plan quality gate."""

    # Structural diversity
    minimum_structural_diversity: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Plans scoring below this against recent history are rejected"
    )
    max_history_comparisons: int = Field(
        default=3,
        ge=1,
        description="Number of most recent plans compared structurally"
    )
    exercise_overlap_weight: float = Field(default=0.5, ge=0.0, le=1.0)
    order_similarity_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    phase_structure_weight: float = Field(default=0.2, ge=0.0, le=1.0)

    # Exercise identity
    minimum_exercise_uniqueness: float = Field(
        default=0.80,
        ge=0.0,
        le=1.0,
        description="Minimum fraction of exercises absent from every previous plan"
    )

    # Validation tolerances
    sets_tolerance: int = Field(default=1, ge=0)
    reps_tolerance: int = Field(default=3, ge=0)
    rest_min_slack_seconds: int = Field(default=30, ge=0)
    rest_max_slack_seconds: int = Field(default=60, ge=0)
    min_rest_seconds: int = Field(
        default=10,
        ge=0,
        description="Floor for normalized rest"
    )
    exercise_count_tolerance: int = Field(default=1, ge=0)
    duration_lower_slack_minutes: int = Field(default=15, ge=0)
    duration_upper_slack_minutes: int = Field(default=20, ge=0)

    # Retry feedback
    feedback_issue_limit: int = Field(
        default=3,
        ge=1,
        description="Maximum validation issues replayed in retry feedback"
    )

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        """Similarity weights must add up to 1."""
        total = (
            self.exercise_overlap_weight
            + self.order_similarity_weight
            + self.phase_structure_weight
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Similarity weights must sum to 1.0 (got {total:.3f})")
        return self

    @classmethod
    def from_file(cls, config_path: Path) -> "QualityGateConfig":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to a JSON object with any subset of the fields

        Returns:
            QualityGateConfig

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the JSON or its contents are invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config JSON: {e}")

        if not isinstance(data, dict):
            raise ValueError("Invalid config file: expected a JSON object")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ValueError(f"Invalid config file: {e}")
