"""
Result models for the workout plan quality gate.

Every gate outcome is a value: validation issues, diversity scores and the
final status are returned, never raised.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from fittoday.schemas import WorkoutPlan


# ============================================================================
# Validation
# ============================================================================

class IssueCode(str, Enum):
    """Machine-readable validation issue codes."""
    EMPTY_BLUEPRINT = "empty_blueprint"
    EMPTY_PLAN = "empty_plan"
    INCOMPATIBLE_EQUIPMENT = "incompatible_equipment"
    FORBIDDEN_EQUIPMENT = "forbidden_equipment"
    MISSING_PHASE = "missing_phase"
    TOO_FEW_EXERCISES = "too_few_exercises"
    TOO_MANY_EXERCISES = "too_many_exercises"
    INVALID_SETS = "invalid_sets"
    INVALID_REPS = "invalid_reps"
    INVALID_REST = "invalid_rest"
    MISSING_AEROBIC_FOR_GOAL = "missing_aerobic_for_goal"
    DURATION_OUT_OF_RANGE = "duration_out_of_range"


CRITICAL_ISSUE_CODES = frozenset({
    IssueCode.EMPTY_BLUEPRINT,
    IssueCode.EMPTY_PLAN,
    IssueCode.INCOMPATIBLE_EQUIPMENT,
    IssueCode.FORBIDDEN_EQUIPMENT,
    IssueCode.MISSING_PHASE,
    IssueCode.MISSING_AEROBIC_FOR_GOAL,
})


class ValidationIssue(BaseModel):
    """A single problem found while checking a plan against its blueprint."""

    code: IssueCode = Field(..., description="Issue code")
    message: str = Field(..., description="Human-readable message (pt-BR)")
    is_critical: bool = Field(
        default=False,
        description="Critical issues cannot be fixed by normalization"
    )

    @classmethod
    def of(cls, code: IssueCode, message: str) -> "ValidationIssue":
        """Build an issue whose criticality follows from its code."""
        return cls(code=code, message=message, is_critical=code in CRITICAL_ISSUE_CODES)


class PlanValidationResult(BaseModel):
    """Outcome of the structural validation stage."""

    is_valid: bool = Field(..., description="True when no issues were found")
    issues: List[ValidationIssue] = Field(default_factory=list)

    @property
    def has_critical_issues(self) -> bool:
        return any(issue.is_critical for issue in self.issues)

    @property
    def can_be_normalized(self) -> bool:
        return not self.has_critical_issues

    @property
    def messages(self) -> List[str]:
        return [issue.message for issue in self.issues]


# ============================================================================
# Diversity
# ============================================================================

class OverlapDetails(BaseModel):
    """Per-component similarity, averaged over the compared plans."""

    exercise_overlap: float = Field(default=0.0, ge=0.0, le=1.0)
    order_similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    phase_structure_similarity: float = Field(default=0.0, ge=0.0, le=1.0)


class DiversityResult(BaseModel):
    """Structural diversity of a plan against recent history."""

    score: float = Field(..., ge=0.0, le=1.0, description="1 - weighted similarity to recent plans")
    passes_gate: bool
    overlap_details: OverlapDetails = Field(default_factory=OverlapDetails)
    compared_plans: int = Field(default=0, ge=0)

    @property
    def similarity(self) -> float:
        return 1.0 - self.score


class ExerciseDiversityResult(BaseModel):
    """How many of a plan's exercises are new relative to history."""

    score: float = Field(..., ge=0.0, le=1.0, description="Fraction of new exercises")
    unique_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    repeated_exercise_ids: List[str] = Field(default_factory=list)
    minimum_required: float = Field(..., ge=0.0, le=1.0)
    is_valid: bool


# ============================================================================
# Gate
# ============================================================================

class QualityGateStatus(str, Enum):
    """Terminal state of the quality gate."""
    PASSED = "passed"
    NORMALIZED_AND_PASSED = "normalizedAndPassed"
    FAILED_VALIDATION = "failedValidation"
    FAILED_DIVERSITY = "failedDiversity"
    FAILED_EXERCISE_DIVERSITY = "failedExerciseDiversity"


class QualityGateResult(BaseModel):
    """
    Full outcome of running a plan through the quality gate.

    final_plan is only set when the plan was accepted.
    """

    status: QualityGateStatus
    original_plan: WorkoutPlan
    final_plan: Optional[WorkoutPlan] = None
    validation_result: PlanValidationResult
    diversity_result: Optional[DiversityResult] = None
    exercise_diversity_result: Optional[ExerciseDiversityResult] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (
            QualityGateStatus.PASSED,
            QualityGateStatus.NORMALIZED_AND_PASSED,
        )
