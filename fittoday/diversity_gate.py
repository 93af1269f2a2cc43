"""
Diversity checks between a new plan and the user's recent history.

Two independent rules:
- WorkoutDiversityGate: structural similarity (exercise overlap, relative
  order, phase layout) against the most recent plans
- ExerciseDiversityRule: fraction of the new plan's exercises that never
  appeared in any previous plan
"""

from typing import List, Optional, Sequence, Tuple

from loguru import logger

from fittoday.config import QualityGateConfig
from fittoday.gate_schemas import DiversityResult, ExerciseDiversityResult, OverlapDetails
from fittoday.schemas import WorkoutPlan

# Common exercises whose relative positions differ by less than this count as same order
RELATIVE_POSITION_TOLERANCE = 0.2


def order_similarity(a: List[str], b: List[str]) -> float:
    """
    Fraction of shared exercises that sit at a similar relative position.

    Positions are normalized by list length, so a 4-exercise and an
    8-exercise plan can still be compared.
    """
    if not a or not b:
        return 0.0
    common = set(a) & set(b)
    if not common:
        return 0.0

    same_position = 0
    for exercise_id in common:
        relative_a = a.index(exercise_id) / len(a)
        relative_b = b.index(exercise_id) / len(b)
        if abs(relative_a - relative_b) < RELATIVE_POSITION_TOLERANCE:
            same_position += 1
    return same_position / len(common)


def compare_plans(a: WorkoutPlan, b: WorkoutPlan) -> Tuple[float, float, float]:
    """
    Compare two plans.

    Returns:
        (exercise overlap, order similarity, phase structure similarity),
        each in [0, 1]
    """
    ids_a = set(a.exercise_ids)
    ids_b = set(b.exercise_ids)
    union = ids_a | ids_b
    overlap = len(ids_a & ids_b) / len(union) if union else 0.0

    order = order_similarity(a.exercise_ids, b.exercise_ids)

    kinds_a = [phase.kind for phase in a.phases]
    kinds_b = [phase.kind for phase in b.phases]
    if kinds_a == kinds_b:
        phase = 1.0
    else:
        phase = len(set(kinds_a) & set(kinds_b)) / max(len(kinds_a), len(kinds_b))

    return overlap, order, phase


class WorkoutDiversityGate:
    """Rejects plans that are structurally too close to recent ones."""

    def __init__(self, config: Optional[QualityGateConfig] = None):
        self.config = config or QualityGateConfig()

    def analyze(self, new_plan: WorkoutPlan, previous_plans: Sequence[WorkoutPlan]) -> DiversityResult:
        """
        Score a plan's diversity against history.

        Args:
            new_plan: Candidate plan
            previous_plans: History ordered oldest to newest; only the last
                max_history_comparisons plans are compared

        Returns:
            DiversityResult (score 1.0 with no history)
        """
        if not previous_plans:
            return DiversityResult(score=1.0, passes_gate=True)

        config = self.config
        recent = list(previous_plans)[-config.max_history_comparisons:]

        total_overlap = total_order = total_phase = 0.0
        for previous in recent:
            overlap, order, phase = compare_plans(new_plan, previous)
            total_overlap += overlap
            total_order += order
            total_phase += phase

        count = len(recent)
        details = OverlapDetails(
            exercise_overlap=total_overlap / count,
            order_similarity=total_order / count,
            phase_structure_similarity=total_phase / count,
        )
        similarity = (
            details.exercise_overlap * config.exercise_overlap_weight
            + details.order_similarity * config.order_similarity_weight
            + details.phase_structure_similarity * config.phase_structure_weight
        )
        score = min(1.0, max(0.0, 1.0 - similarity))

        logger.debug(
            "[DIVERSITY] Structural diversity",
            score=round(score, 3),
            overlap=round(details.exercise_overlap, 3),
            order=round(details.order_similarity, 3),
            phase=round(details.phase_structure_similarity, 3),
            compared=count,
        )

        return DiversityResult(
            score=score,
            passes_gate=score >= config.minimum_structural_diversity,
            overlap_details=details,
            compared_plans=count,
        )


class ExerciseDiversityRule:
    """
    Requires most of a plan's exercises to be new.

    An exercise is repeated when its id appears in any previous plan.
    """

    def __init__(self, config: Optional[QualityGateConfig] = None):
        self.config = config or QualityGateConfig()

    def evaluate(
        self, new_plan: WorkoutPlan, previous_plans: Sequence[WorkoutPlan]
    ) -> ExerciseDiversityResult:
        """
        Measure how many exercises in new_plan are absent from history.

        Args:
            new_plan: Candidate plan
            previous_plans: Every previous plan to compare against

        Returns:
            ExerciseDiversityResult (score 1.0 for an empty plan or empty history)
        """
        minimum = self.config.minimum_exercise_uniqueness
        new_ids = new_plan.exercise_ids

        if not new_ids or not previous_plans:
            return ExerciseDiversityResult(
                score=1.0,
                unique_count=len(new_ids),
                total_count=len(new_ids),
                minimum_required=minimum,
                is_valid=True,
            )

        seen = {exercise_id for plan in previous_plans for exercise_id in plan.exercise_ids}
        repeated = [exercise_id for exercise_id in new_ids if exercise_id in seen]
        unique_count = len(new_ids) - len(repeated)
        score = unique_count / len(new_ids)

        if repeated:
            logger.debug(
                "[DIVERSITY] Repeated exercises",
                repeated=repeated,
                unique=unique_count,
                total=len(new_ids),
            )

        return ExerciseDiversityResult(
            score=score,
            unique_count=unique_count,
            total_count=len(new_ids),
            repeated_exercise_ids=repeated,
            minimum_required=minimum,
            is_valid=score >= minimum,
        )
