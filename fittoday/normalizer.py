"""
Non-destructive normalization of workout plans.

Brings a plan back in line with its blueprint without adding or removing
items: prescriptions are clamped into the block ranges, phases are put in
canonical order and the duration is recomputed when it is out of range.
"""

import math
from typing import List, Optional

from loguru import logger

from fittoday.blueprint_schemas import WorkoutBlockBlueprint, WorkoutBlueprint
from fittoday.config import QualityGateConfig
from fittoday.schemas import (
    ExercisePrescription,
    IntRange,
    WorkoutPlan,
    WorkoutPlanPhase,
    phase_order_index,
)
from fittoday.validator import duration_window

# Seconds per repetition used to estimate work time
SECONDS_PER_REP = 3
# Transition time added per phase
PHASE_TRANSITION_SECONDS = 60
MINIMUM_PLAN_MINUTES = 15


def estimate_plan_duration(phases: List[WorkoutPlanPhase]) -> int:
    """
    Estimate session length in minutes from its content.

    Work is average reps x 3 s x sets, rest is rest x (sets - 1), guided
    activities count their full duration and every phase adds a one-minute
    transition.
    """
    total_seconds = 0
    for phase in phases:
        for item in phase.items:
            if isinstance(item, ExercisePrescription):
                work = item.reps.average * SECONDS_PER_REP * item.sets
                rest = item.rest_seconds * max(0, item.sets - 1)
                total_seconds += work + rest
            else:
                total_seconds += item.duration_minutes * 60
    total_seconds += len(phases) * PHASE_TRANSITION_SECONDS
    return max(MINIMUM_PLAN_MINUTES, math.ceil(total_seconds / 60))


class WorkoutPlanNormalizer:
    """
    Clamps a plan into its blueprint's ranges.

    normalize() never raises and never drops items; phases without a
    matching block pass through unchanged.
    """

    def __init__(self, config: Optional[QualityGateConfig] = None):
        self.config = config or QualityGateConfig()

    def normalize(self, plan: WorkoutPlan, blueprint: WorkoutBlueprint) -> WorkoutPlan:
        """
        Normalize a plan against its blueprint.

        Args:
            plan: Plan to normalize (not modified)
            blueprint: Blueprint providing ranges, rest and RPE

        Returns:
            A new WorkoutPlan (equal to the input when nothing needed fixing)
        """
        phases = [self._normalize_phase(phase, blueprint) for phase in plan.phases]

        # Stable sort keeps relative order of phases of the same kind
        phases.sort(key=lambda phase: phase_order_index(phase.kind))

        duration = plan.estimated_duration_minutes
        lower, upper = duration_window(blueprint, self.config)
        if not lower <= duration <= upper:
            duration = estimate_plan_duration(phases)
            logger.debug(
                "[NORMALIZER] Duration recomputed",
                plan_id=str(plan.id),
                original_minutes=plan.estimated_duration_minutes,
                normalized_minutes=duration,
            )

        return plan.model_copy(update={
            "phases": phases,
            "estimated_duration_minutes": duration,
        })

    def _normalize_phase(
        self, phase: WorkoutPlanPhase, blueprint: WorkoutBlueprint
    ) -> WorkoutPlanPhase:
        block = blueprint.block_for(phase.kind)
        if block is None or block.exercise_count <= 0:
            return phase

        items = [
            self._normalize_prescription(item, block)
            if isinstance(item, ExercisePrescription) else item
            for item in phase.items
        ]
        return phase.model_copy(update={"items": items, "rpe_target": block.rpe_target})

    def _normalize_prescription(
        self, prescription: ExercisePrescription, block: WorkoutBlockBlueprint
    ) -> ExercisePrescription:
        min_rest = max(self.config.min_rest_seconds, block.rest_seconds - self.config.rest_min_slack_seconds)
        max_rest = block.rest_seconds + self.config.rest_max_slack_seconds

        reps = IntRange(
            block.reps_range.clamp(prescription.reps.lower_bound),
            block.reps_range.clamp(prescription.reps.upper_bound),
        )
        return prescription.model_copy(update={
            "sets": block.sets_range.clamp(prescription.sets),
            "reps": reps,
            "rest_seconds": min(max(prescription.rest_seconds, min_rest), max_rest),
        })
