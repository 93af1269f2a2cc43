"""
Diversity between workout blueprints.

Compares blueprints on their categorical attributes (goal, focus, location,
level, soreness, recovery mode), their intensity tier, block composition,
target muscles and duration. Each attribute contributes an independent
difference d_i in [0, 1]; the combined score is 1 - prod(1 - d_i), so one
categorical difference is enough to make two blueprints diverse while
blueprints that differ only by seed score 0.
"""

from collections import Counter
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from fittoday.blueprint_schemas import WorkoutBlueprint

MINIMUM_DIVERSITY_SCORE = 0.3

GOAL_WEIGHT = 0.5
FOCUS_WEIGHT = 0.5
STRUCTURE_WEIGHT = 0.4
LEVEL_WEIGHT = 0.35
SORENESS_WEIGHT = 0.35
RECOVERY_WEIGHT = 0.4
INTENSITY_WEIGHT_PER_TIER = 0.3
BLOCK_COMPOSITION_WEIGHT = 0.5
MUSCLE_WEIGHT = 0.5

# Number of recent blueprints inspected by suggest_variation
SUGGESTION_WINDOW = 3


def _jaccard_distance(a: Set, b: Set) -> float:
    union = a | b
    if not union:
        return 0.0
    return 1.0 - len(a & b) / len(union)


def _block_signatures(blueprint: WorkoutBlueprint) -> Set[Tuple]:
    return {
        (
            block.phase_kind.value,
            block.exercise_count,
            block.sets_range.lower_bound,
            block.sets_range.upper_bound,
            block.reps_range.lower_bound,
            block.reps_range.upper_bound,
        )
        for block in blueprint.blocks
    }


def _target_muscles(blueprint: WorkoutBlueprint) -> Set:
    return {muscle for block in blueprint.blocks for muscle in block.target_muscles}


def _differences(a: WorkoutBlueprint, b: WorkoutBlueprint) -> Iterable[float]:
    yield GOAL_WEIGHT if a.goal != b.goal else 0.0
    yield FOCUS_WEIGHT if a.focus != b.focus else 0.0
    yield STRUCTURE_WEIGHT if a.structure != b.structure else 0.0
    yield LEVEL_WEIGHT if a.level != b.level else 0.0
    yield SORENESS_WEIGHT if a.soreness_level != b.soreness_level else 0.0
    yield RECOVERY_WEIGHT if a.is_recovery_mode != b.is_recovery_mode else 0.0
    yield min(1.0, INTENSITY_WEIGHT_PER_TIER * abs(a.intensity.tier - b.intensity.tier))
    yield BLOCK_COMPOSITION_WEIGHT * _jaccard_distance(_block_signatures(a), _block_signatures(b))
    yield MUSCLE_WEIGHT * _jaccard_distance(_target_muscles(a), _target_muscles(b))

    duration_gap = abs(a.estimated_duration_minutes - b.estimated_duration_minutes)
    if duration_gap >= 10:
        yield 0.2
    elif duration_gap >= 5:
        yield 0.1


class BlueprintDiversityChecker:
    """Scores how different two blueprints are (0 = identical structure, 1 = unrelated)."""

    minimum_diversity_score = MINIMUM_DIVERSITY_SCORE

    @staticmethod
    def diversity_score(a: WorkoutBlueprint, b: WorkoutBlueprint) -> float:
        """
        Diversity between two blueprints.

        Ignores ids, seeds and timestamps; only structure counts.

        Returns:
            Score in [0, 1]
        """
        sameness = 1.0
        for difference in _differences(a, b):
            sameness *= 1.0 - difference
        return min(1.0, max(0.0, 1.0 - sameness))

    @classmethod
    def are_diverse(cls, a: WorkoutBlueprint, b: WorkoutBlueprint) -> bool:
        """True when the diversity score is strictly above the minimum."""
        return cls.diversity_score(a, b) > cls.minimum_diversity_score

    @staticmethod
    def suggest_variation(
        blueprint: WorkoutBlueprint,
        previous: Sequence[WorkoutBlueprint],
    ) -> Optional[str]:
        """
        Suggest how to vary the next session.

        Args:
            blueprint: Blueprint for today
            previous: Recent blueprints, most recent first

        Returns:
            Suggestion text, or None when recent sessions are varied enough
        """
        recent = list(previous[:SUGGESTION_WINDOW])
        if not recent:
            return None

        suggestions: List[str] = []

        focus_counts = Counter(item.focus for item in recent)
        if focus_counts[blueprint.focus] >= 2:
            suggestions.append(
                f"Foco '{blueprint.focus.value}' usado {focus_counts[blueprint.focus]}x "
                "recentemente. Considere outro foco."
            )

        intensities = {item.intensity for item in recent}
        if len(intensities) == 1:
            suggestions.append("Considere variar a intensidade entre as sessões.")

        return " ".join(suggestions) if suggestions else None
