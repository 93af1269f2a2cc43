"""
Workout blueprint engine.

Builds the structural skeleton of a session from:
- The user's goal (session type: strength, performance, weight loss...)
- Training level (exercise counts, sets, reps, rest)
- Today's check-in (focus, soreness, energy)
- Training location (equipment constraints, base duration)

Generation is deterministic for a given BlueprintInput; variation across calls
comes only from the input's variation seed.
"""

from typing import Dict, List, Optional, Tuple

from loguru import logger

from fittoday.blueprint_schemas import (
    BlueprintDecision,
    BlueprintInput,
    BlueprintVersion,
    EquipmentConstraints,
    WorkoutBlockBlueprint,
    WorkoutBlueprint,
)
from fittoday.cache import BlueprintCache
from fittoday.schemas import (
    ActivityKind,
    DailyCheckIn,
    DailyFocus,
    IntRange,
    MuscleGroup,
    MuscleSorenessLevel,
    PhaseKind,
    TrainingLevel,
    TrainingStructure,
    UserProfile,
    phase_order_index,
)
from fittoday.session_rules import (
    DOMSAdjustment,
    SessionType,
    doms_adjustment_for,
    intensity_for,
    primary_muscles_for,
    secondary_muscles_for,
    session_title,
    session_type_for_goal,
)


# (main, secondary) exercise counts per level
_EXERCISE_COUNTS: Dict[SessionType, Dict[TrainingLevel, Tuple[int, int]]] = {
    SessionType.STRENGTH: {
        TrainingLevel.BEGINNER: (4, 2),
        TrainingLevel.INTERMEDIATE: (5, 3),
        TrainingLevel.ADVANCED: (6, 3),
    },
    SessionType.PERFORMANCE: {
        TrainingLevel.BEGINNER: (3, 2),
        TrainingLevel.INTERMEDIATE: (4, 3),
        TrainingLevel.ADVANCED: (5, 3),
    },
    SessionType.WEIGHT_LOSS: {
        TrainingLevel.BEGINNER: (5, 2),
        TrainingLevel.INTERMEDIATE: (6, 3),
        TrainingLevel.ADVANCED: (7, 3),
    },
    SessionType.CONDITIONING: {
        TrainingLevel.BEGINNER: (4, 2),
        TrainingLevel.INTERMEDIATE: (5, 3),
        TrainingLevel.ADVANCED: (6, 3),
    },
    SessionType.ENDURANCE: {
        TrainingLevel.BEGINNER: (4, 2),
        TrainingLevel.INTERMEDIATE: (5, 3),
        TrainingLevel.ADVANCED: (6, 3),
    },
}

# Main strength block for hypertrophy: (sets, reps, rest seconds) per level
_STRENGTH_PRESCRIPTION: Dict[TrainingLevel, Tuple[IntRange, IntRange, int]] = {
    TrainingLevel.BEGINNER: (IntRange(3, 3), IntRange(8, 12), 90),
    TrainingLevel.INTERMEDIATE: (IntRange(3, 4), IntRange(6, 10), 120),
    TrainingLevel.ADVANCED: (IntRange(4, 5), IntRange(4, 8), 180),
}

_BASE_DURATION: Dict[TrainingStructure, int] = {
    TrainingStructure.BODYWEIGHT: 30,
    TrainingStructure.HOME_DUMBBELLS: 35,
    TrainingStructure.BASIC_GYM: 45,
    TrainingStructure.FULL_GYM: 55,
}

_LEVEL_DURATION_ADJUSTMENT: Dict[TrainingLevel, int] = {
    TrainingLevel.BEGINNER: -5,
    TrainingLevel.INTERMEDIATE: 0,
    TrainingLevel.ADVANCED: 5,
}

MINIMUM_SESSION_MINUTES = 20


def apply_volume_adjustment(sets_range: IntRange, multiplier: float) -> IntRange:
    """
    Scale a sets range by a DOMS volume multiplier.

    Both bounds are truncated; the lower bound never drops below 1 and the
    upper bound never drops below the lower.
    """
    lower = max(1, int(sets_range.lower_bound * multiplier))
    upper = max(lower, int(sets_range.upper_bound * multiplier))
    return IntRange(lower, upper)


class WorkoutBlueprintEngine:
    """
    Generates workout blueprints from profile and check-in data.

    The engine holds no state between calls; every rule it applies is
    recorded as a BlueprintDecision on the returned blueprint.
    """

    def generate_blueprint(self, profile: UserProfile, check_in: DailyCheckIn) -> WorkoutBlueprint:
        """
        Generate a blueprint for today's session.

        A fresh variation seed is drawn for every call, so repeated calls with
        the same profile and check-in share structure but not seed.

        Args:
            profile: User profile (goal, structure, level)
            check_in: Today's check-in (focus, soreness, energy)

        Returns:
            WorkoutBlueprint
        """
        return self.generate_blueprint_from_input(BlueprintInput.from_inputs(profile, check_in))

    def generate_blueprint_from_input(
        self,
        blueprint_input: BlueprintInput,
        cache: Optional[BlueprintCache] = None,
    ) -> WorkoutBlueprint:
        """
        Generate a blueprint from a fully specified input.

        Args:
            blueprint_input: Goal, structure, level, check-in data and seed
            cache: Optional cache; a hit on the input's cache key is returned
                as-is, a miss is generated and stored

        Returns:
            WorkoutBlueprint with blocks in canonical phase order
        """
        cache_key = blueprint_input.cache_key if cache is not None else None
        if cache is not None:
            cached = cache.get(cache_key)
            if cached is not None:
                logger.debug("[BLUEPRINT] Cache hit", cache_key=cache_key)
                return cached

        decisions: List[BlueprintDecision] = []

        # 1. Session type and soreness adjustments
        session_type = session_type_for_goal(blueprint_input.goal)
        decisions.append(BlueprintDecision(
            decision_point="Session type",
            input_factors={"goal": blueprint_input.goal.value},
            reasoning="Each goal maps to one session archetype",
            outcome=session_type.value,
        ))

        doms = doms_adjustment_for(blueprint_input.soreness_level)
        is_recovery = blueprint_input.soreness_level == MuscleSorenessLevel.STRONG
        if doms != DOMSAdjustment():
            decisions.append(BlueprintDecision(
                decision_point="Soreness adjustment",
                input_factors={"soreness_level": blueprint_input.soreness_level.value},
                reasoning=(
                    f"Volume x{doms.volume_multiplier}, +{doms.extra_rest_seconds}s rest"
                    + (", reduced intensity" if doms.intensity_reduction else "")
                ),
                outcome="recovery mode" if is_recovery else "scaled back",
            ))

        # 2. Intensity
        intensity = intensity_for(
            blueprint_input.level,
            blueprint_input.soreness_level,
            blueprint_input.goal,
            blueprint_input.energy_level,
        )
        decisions.append(BlueprintDecision(
            decision_point="Intensity",
            input_factors={
                "level": blueprint_input.level.value,
                "soreness_level": blueprint_input.soreness_level.value,
                "goal": blueprint_input.goal.value,
                "energy_level": blueprint_input.energy_level,
            },
            reasoning="Base tier from level, soreness and goal; low energy drops one tier",
            outcome=intensity.value,
        ))

        # 3. Blocks
        avoid = tuple(blueprint_input.soreness_areas) if is_recovery else ()
        blocks = [self._warmup_block(blueprint_input.focus, doms)]
        blocks.extend(self._goal_blocks(
            session_type, blueprint_input.focus, blueprint_input.level, doms, avoid
        ))
        blocks.append(self._closing_block(session_type, doms))
        blocks.sort(key=lambda block: phase_order_index(block.phase_kind))
        decisions.append(BlueprintDecision(
            decision_point="Block layout",
            input_factors={
                "session_type": session_type.value,
                "level": blueprint_input.level.value,
                "focus": blueprint_input.focus.value,
            },
            reasoning="Warmup, goal-specific blocks, then a closing guided block",
            outcome=", ".join(f"{b.phase_kind.value}x{b.exercise_count}" for b in blocks),
        ))
        if avoid:
            decisions.append(BlueprintDecision(
                decision_point="Muscles to avoid",
                input_factors={"soreness_areas": [area.value for area in avoid]},
                reasoning="Strongly sore muscles are kept out of the goal blocks",
                outcome=", ".join(area.value for area in avoid),
            ))

        # 4. Duration, constraints and title
        duration = self._estimate_duration(blocks, blueprint_input.level, blueprint_input.structure)
        decisions.append(BlueprintDecision(
            decision_point="Duration",
            input_factors={
                "structure": blueprint_input.structure.value,
                "level": blueprint_input.level.value,
            },
            reasoning="Base by location, adjusted by level, plus guided activity minutes",
            outcome=f"{duration} min",
        ))

        blueprint = WorkoutBlueprint(
            version=BlueprintVersion.current(),
            variation_seed=blueprint_input.variation_seed,
            title=session_title(blueprint_input.focus, blueprint_input.goal, is_recovery),
            focus=blueprint_input.focus,
            goal=blueprint_input.goal,
            structure=blueprint_input.structure,
            level=blueprint_input.level,
            soreness_level=blueprint_input.soreness_level,
            intensity=intensity,
            estimated_duration_minutes=duration,
            blocks=tuple(blocks),
            equipment_constraints=EquipmentConstraints.from_structure(blueprint_input.structure),
            is_recovery_mode=is_recovery,
            decisions=tuple(decisions),
        )

        logger.debug(
            "[BLUEPRINT] Generated blueprint",
            title=blueprint.title,
            goal=blueprint.goal.value,
            intensity=blueprint.intensity.value,
            blocks=len(blueprint.blocks),
            exercises=blueprint.total_exercise_count,
            duration_minutes=duration,
            seed=blueprint.variation_seed,
        )

        if cache is not None:
            cache.set(cache_key, blueprint)
        return blueprint

    # ------------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------------

    def _warmup_block(self, focus: DailyFocus, doms: DOMSAdjustment) -> WorkoutBlockBlueprint:
        reduced = doms.intensity_reduction
        return WorkoutBlockBlueprint(
            phase_kind=PhaseKind.WARMUP,
            title="Aquecimento",
            exercise_count=1 if reduced else 2,
            sets_range=IntRange(1, 1),
            reps_range=IntRange(8, 12),
            rest_seconds=40 if reduced else 25,
            rpe_target=5 if reduced else 6,
            target_muscles=tuple(primary_muscles_for(focus)),
            guided_activity_kind=ActivityKind.MOBILITY,
            guided_activity_minutes=8 if reduced else 6,
        )

    def _goal_blocks(
        self,
        session_type: SessionType,
        focus: DailyFocus,
        level: TrainingLevel,
        doms: DOMSAdjustment,
        avoid: Tuple[MuscleGroup, ...],
    ) -> List[WorkoutBlockBlueprint]:
        """
        Main and secondary blocks for the session type.

        Args:
            session_type: Session archetype
            focus: Today's focus (drives target muscles)
            level: Training level (drives counts and strength prescription)
            doms: Soreness adjustment
            avoid: Muscles excluded from these blocks

        Returns:
            Two blocks: a strength block and an accessory or conditioning block
        """
        main_count, secondary_count = _EXERCISE_COUNTS[session_type][level]
        primary = tuple(primary_muscles_for(focus))
        secondary = tuple(secondary_muscles_for(focus))
        extra_rest = doms.extra_rest_seconds

        if session_type == SessionType.STRENGTH:
            sets, reps, rest = _STRENGTH_PRESCRIPTION[level]
            main = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.STRENGTH,
                title="Força Principal",
                exercise_count=main_count,
                sets_range=apply_volume_adjustment(sets, doms.volume_multiplier),
                reps_range=reps,
                rest_seconds=rest + extra_rest,
                rpe_target=7 if doms.avoid_failure else 8,
                target_muscles=primary,
                avoid_muscles=avoid,
            )
            other = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.ACCESSORY,
                title="Acessórios",
                exercise_count=secondary_count,
                sets_range=IntRange(2, 3),
                reps_range=IntRange(10, 15),
                rest_seconds=60 + extra_rest,
                rpe_target=6,
                target_muscles=secondary,
                avoid_muscles=avoid,
            )
        elif session_type == SessionType.PERFORMANCE:
            main = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.STRENGTH,
                title="Performance Atlética",
                exercise_count=main_count,
                sets_range=IntRange(3, 4),
                reps_range=IntRange(5, 8),
                rest_seconds=90 + extra_rest,
                rpe_target=7,
                target_muscles=primary,
                avoid_muscles=avoid,
            )
            other = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.CONDITIONING,
                title="Condicionamento Funcional",
                exercise_count=secondary_count,
                sets_range=IntRange(2, 3),
                reps_range=IntRange(10, 15),
                rest_seconds=45,
                rpe_target=7,
                target_muscles=(MuscleGroup.FULL_BODY,),
                avoid_muscles=avoid,
            )
        elif session_type == SessionType.WEIGHT_LOSS:
            main = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.STRENGTH,
                title="Circuito Metabólico",
                exercise_count=main_count,
                sets_range=apply_volume_adjustment(IntRange(3, 4), doms.volume_multiplier),
                reps_range=IntRange(12, 18),
                rest_seconds=30 + extra_rest,
                rpe_target=6 if doms.intensity_reduction else 7,
                target_muscles=primary,
                avoid_muscles=avoid,
            )
            other = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.ACCESSORY,
                title="Finalizadores",
                exercise_count=secondary_count,
                sets_range=IntRange(2, 3),
                reps_range=IntRange(15, 20),
                rest_seconds=20,
                rpe_target=6,
                target_muscles=secondary,
                avoid_muscles=avoid,
            )
        elif session_type == SessionType.CONDITIONING:
            main = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.STRENGTH,
                title="Força & Condicionamento",
                exercise_count=main_count,
                sets_range=IntRange(3, 4),
                reps_range=IntRange(10, 15),
                rest_seconds=60 + extra_rest,
                rpe_target=6,
                target_muscles=primary,
                avoid_muscles=avoid,
            )
            other = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.ACCESSORY,
                title="Acessórios Funcionais",
                exercise_count=secondary_count,
                sets_range=IntRange(2, 3),
                reps_range=IntRange(12, 18),
                rest_seconds=45,
                rpe_target=5,
                target_muscles=secondary,
                avoid_muscles=avoid,
            )
        else:
            main = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.STRENGTH,
                title="Resistência Muscular",
                exercise_count=main_count,
                sets_range=IntRange(2, 3),
                reps_range=IntRange(15, 25),
                rest_seconds=30 + extra_rest,
                rpe_target=6,
                target_muscles=primary,
                avoid_muscles=avoid,
            )
            other = WorkoutBlockBlueprint(
                phase_kind=PhaseKind.ACCESSORY,
                title="Complementares",
                exercise_count=secondary_count,
                sets_range=IntRange(2, 3),
                reps_range=IntRange(15, 20),
                rest_seconds=20,
                rpe_target=5,
                target_muscles=secondary,
                avoid_muscles=avoid,
            )
        return [main, other]

    def _closing_block(self, session_type: SessionType, doms: DOMSAdjustment) -> WorkoutBlockBlueprint:
        """Guided block that ends the session (aerobic work, or breathing for strength)."""
        reduced = doms.intensity_reduction
        phase_kind = PhaseKind.AEROBIC
        rpe = 6
        if session_type == SessionType.WEIGHT_LOSS:
            kind, title, minutes = ActivityKind.AEROBIC_INTERVALS, "Aeróbio Intervalado (leve)", 10 if reduced else 15
        elif session_type in (SessionType.CONDITIONING, SessionType.ENDURANCE):
            kind, title, minutes = ActivityKind.AEROBIC_ZONE_2, "Aeróbio Zona 2", 12 if reduced else 18
        elif session_type == SessionType.PERFORMANCE:
            kind, title, minutes = ActivityKind.AEROBIC_INTERVALS, "Condicionamento Intervalado", 10
        else:
            phase_kind = PhaseKind.COOLDOWN
            kind, title, minutes = ActivityKind.BREATHING, "Desaceleração", 5
            rpe = 3

        return WorkoutBlockBlueprint(
            phase_kind=phase_kind,
            title=title,
            exercise_count=0,
            sets_range=IntRange(0, 0),
            reps_range=IntRange(0, 0),
            rest_seconds=0,
            rpe_target=rpe,
            target_muscles=(MuscleGroup.CARDIO_SYSTEM,) if phase_kind == PhaseKind.AEROBIC else (),
            guided_activity_kind=kind,
            guided_activity_minutes=minutes,
        )

    # ------------------------------------------------------------------------
    # Duration
    # ------------------------------------------------------------------------

    def _estimate_duration(
        self,
        blocks: List[WorkoutBlockBlueprint],
        level: TrainingLevel,
        structure: TrainingStructure,
    ) -> int:
        guided_minutes = sum(block.guided_activity_minutes for block in blocks)
        duration = _BASE_DURATION[structure] + _LEVEL_DURATION_ADJUSTMENT[level] + guided_minutes
        return max(MINIMUM_SESSION_MINUTES, duration)
