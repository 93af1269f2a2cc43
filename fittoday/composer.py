"""
Local plan composer.

Turns a blueprint into a concrete WorkoutPlan by picking catalog exercises
for each block. Selection is driven by the blueprint's variation seed, so the
same blueprint and catalog always compose the same plan.
"""

from typing import Dict, List, Sequence, Set

from loguru import logger

from fittoday.blueprint_schemas import WorkoutBlockBlueprint, WorkoutBlueprint
from fittoday.schemas import (
    ActivityKind,
    ActivityPrescription,
    ExercisePrescription,
    WorkoutExercise,
    WorkoutPlan,
    WorkoutPlanItem,
    WorkoutPlanPhase,
)
from fittoday.seeded_random import SeededRandomGenerator

_ACTIVITY_TITLES: Dict[ActivityKind, str] = {
    ActivityKind.MOBILITY: "Mobilidade articular",
    ActivityKind.AEROBIC_ZONE_2: "Aeróbio Zona 2",
    ActivityKind.AEROBIC_INTERVALS: "Aeróbio intervalado",
    ActivityKind.BREATHING: "Respiração guiada",
    ActivityKind.COOLDOWN: "Volta à calma",
}


class BlueprintPlanComposer:
    """
    Composes plans from blueprints without any remote service.

    Each block becomes one phase. Exercises must use permitted equipment,
    avoid sore muscles and never repeat within the plan; exercises that hit
    the block's target muscles are preferred.
    """

    def compose(self, blueprint: WorkoutBlueprint, catalog: Sequence[WorkoutExercise]) -> WorkoutPlan:
        """
        Compose a plan for a blueprint.

        Args:
            blueprint: Structural skeleton of the session
            catalog: Exercises available to pick from

        Returns:
            WorkoutPlan with one phase per block, in block order
        """
        rng = SeededRandomGenerator(blueprint.variation_seed)
        used_ids: Set[str] = set()
        phases: List[WorkoutPlanPhase] = []

        for block in blueprint.blocks:
            items: List[WorkoutPlanItem] = []
            if block.includes_guided_activity:
                items.append(ActivityPrescription(
                    kind=block.guided_activity_kind,
                    title=_ACTIVITY_TITLES[block.guided_activity_kind],
                    duration_minutes=block.guided_activity_minutes,
                ))

            for exercise in self._pick_exercises(block, blueprint, catalog, used_ids, rng):
                used_ids.add(exercise.id)
                items.append(ExercisePrescription(
                    exercise=exercise,
                    sets=rng.next_int(block.sets_range.lower_bound, block.sets_range.upper_bound),
                    reps=block.reps_range,
                    rest_seconds=block.rest_seconds,
                    tip=exercise.instructions[0] if exercise.instructions else None,
                ))

            phases.append(WorkoutPlanPhase(
                kind=block.phase_kind,
                title=block.title,
                rpe_target=block.rpe_target,
                items=items,
            ))

        plan = WorkoutPlan(
            title=blueprint.title,
            focus=blueprint.focus,
            estimated_duration_minutes=blueprint.estimated_duration_minutes,
            intensity=blueprint.intensity,
            phases=phases,
        )

        logger.debug(
            "[COMPOSER] Plan composed",
            title=plan.title,
            phases=len(phases),
            exercises=len(plan.exercises),
            expected=blueprint.total_exercise_count,
        )
        return plan

    def _pick_exercises(
        self,
        block: WorkoutBlockBlueprint,
        blueprint: WorkoutBlueprint,
        catalog: Sequence[WorkoutExercise],
        used_ids: Set[str],
        rng: SeededRandomGenerator,
    ) -> List[WorkoutExercise]:
        if block.exercise_count <= 0:
            return []

        constraints = blueprint.equipment_constraints
        avoided = set(block.avoid_muscles)
        eligible = [
            exercise for exercise in catalog
            if constraints.permits(exercise.equipment)
            and exercise.main_muscle not in avoided
            and exercise.id not in used_ids
        ]
        targets = set(block.target_muscles)
        preferred = [exercise for exercise in eligible if exercise.main_muscle in targets]
        fallback = [exercise for exercise in eligible if exercise.main_muscle not in targets]

        picked = rng.select_elements(preferred, block.exercise_count)
        if len(picked) < block.exercise_count:
            picked += rng.select_elements(fallback, block.exercise_count - len(picked))
        return picked
