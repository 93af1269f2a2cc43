"""
Session rules shared by the blueprint engine.

Maps goals to session types, soreness to DOMS adjustments, and the
(level, soreness, goal, energy) combination to an intensity tier. Also owns
session titles and the muscle targets for each daily focus.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from fittoday.schemas import (
    DailyFocus,
    FitnessGoal,
    INTENSITY_ORDER,
    MuscleGroup,
    MuscleSorenessLevel,
    TrainingLevel,
    WorkoutIntensity,
)

# Energy at or below this level drops the intensity one tier
LOW_ENERGY_THRESHOLD = 3


class SessionType(str, Enum):
    """Session archetype derived from the fitness goal."""
    STRENGTH = "strength"
    PERFORMANCE = "performance"
    WEIGHT_LOSS = "weightLoss"
    CONDITIONING = "conditioning"
    ENDURANCE = "endurance"


class DOMSAdjustment(BaseModel):
    """How much a session is scaled back for muscle soreness."""

    model_config = ConfigDict(frozen=True)

    volume_multiplier: float = Field(default=1.0, gt=0, le=1.0)
    intensity_reduction: bool = False
    avoid_plyometrics: bool = False
    avoid_failure: bool = False
    extra_rest_seconds: int = Field(default=0, ge=0)
    substitute_high_impact: bool = False


def session_type_for_goal(goal: FitnessGoal) -> SessionType:
    """Map a fitness goal to its session type."""
    return {
        FitnessGoal.HYPERTROPHY: SessionType.STRENGTH,
        FitnessGoal.PERFORMANCE: SessionType.PERFORMANCE,
        FitnessGoal.WEIGHT_LOSS: SessionType.WEIGHT_LOSS,
        FitnessGoal.CONDITIONING: SessionType.CONDITIONING,
        FitnessGoal.ENDURANCE: SessionType.ENDURANCE,
    }[goal]


def doms_adjustment_for(soreness: MuscleSorenessLevel) -> DOMSAdjustment:
    """
    Scale-back rules for a soreness level.

    Args:
        soreness: DOMS level from the check-in

    Returns:
        DOMSAdjustment (no-op for none and light soreness)
    """
    if soreness == MuscleSorenessLevel.MODERATE:
        return DOMSAdjustment(
            volume_multiplier=0.9,
            avoid_failure=True,
            extra_rest_seconds=15,
        )
    if soreness == MuscleSorenessLevel.STRONG:
        return DOMSAdjustment(
            volume_multiplier=0.7,
            intensity_reduction=True,
            avoid_plyometrics=True,
            avoid_failure=True,
            extra_rest_seconds=30,
            substitute_high_impact=True,
        )
    return DOMSAdjustment()


def base_intensity_for(
    level: TrainingLevel,
    soreness: MuscleSorenessLevel,
    goal: FitnessGoal,
) -> WorkoutIntensity:
    """Intensity tier before the energy adjustment."""
    if soreness == MuscleSorenessLevel.STRONG:
        return WorkoutIntensity.LOW
    if level == TrainingLevel.ADVANCED and soreness == MuscleSorenessLevel.NONE:
        if goal in (FitnessGoal.HYPERTROPHY, FitnessGoal.PERFORMANCE):
            return WorkoutIntensity.HIGH
        return WorkoutIntensity.MODERATE
    if soreness == MuscleSorenessLevel.MODERATE:
        return WorkoutIntensity.LOW
    if goal == FitnessGoal.HYPERTROPHY:
        if level == TrainingLevel.BEGINNER:
            return WorkoutIntensity.MODERATE
        return WorkoutIntensity.HIGH
    return WorkoutIntensity.MODERATE


def intensity_for(
    level: TrainingLevel,
    soreness: MuscleSorenessLevel,
    goal: FitnessGoal,
    energy_level: int = 5,
) -> WorkoutIntensity:
    """
    Intensity tier for a session.

    Low energy (<= 3) drops the base tier by one, never below low, so lower
    energy can never produce a higher tier.
    """
    intensity = base_intensity_for(level, soreness, goal)
    if energy_level <= LOW_ENERGY_THRESHOLD:
        return INTENSITY_ORDER[max(0, intensity.tier - 1)]
    return intensity


def session_title(focus: DailyFocus, goal: FitnessGoal, is_recovery: bool = False) -> str:
    """Display title such as 'Upper Força' or 'Lower Fat Burn (Recovery)'."""
    prefix = {
        DailyFocus.UPPER: "Upper",
        DailyFocus.LOWER: "Lower",
        DailyFocus.FULL_BODY: "Full Body",
        DailyFocus.CARDIO: "Cardio",
        DailyFocus.CORE: "Core",
        DailyFocus.SURPRISE: "Mix",
    }[focus]
    suffix = {
        FitnessGoal.HYPERTROPHY: "Força",
        FitnessGoal.PERFORMANCE: "Performance",
        FitnessGoal.WEIGHT_LOSS: "Fat Burn",
        FitnessGoal.CONDITIONING: "Conditioning",
        FitnessGoal.ENDURANCE: "Endurance",
    }[goal]
    title = f"{prefix} {suffix}"
    if is_recovery:
        title += " (Recovery)"
    return title


def primary_muscles_for(focus: DailyFocus) -> List[MuscleGroup]:
    """Muscles targeted by the main blocks and the warmup."""
    return {
        DailyFocus.UPPER: [MuscleGroup.CHEST, MuscleGroup.BACK, MuscleGroup.SHOULDERS],
        DailyFocus.LOWER: [
            MuscleGroup.QUADS,
            MuscleGroup.QUADRICEPS,
            MuscleGroup.GLUTES,
            MuscleGroup.HAMSTRINGS,
        ],
        DailyFocus.FULL_BODY: [
            MuscleGroup.CHEST,
            MuscleGroup.BACK,
            MuscleGroup.QUADS,
            MuscleGroup.QUADRICEPS,
        ],
        DailyFocus.CARDIO: [MuscleGroup.CARDIO_SYSTEM, MuscleGroup.FULL_BODY],
        DailyFocus.CORE: [MuscleGroup.CORE],
        DailyFocus.SURPRISE: [MuscleGroup.FULL_BODY],
    }[focus]


def secondary_muscles_for(focus: DailyFocus) -> List[MuscleGroup]:
    """Muscles targeted by accessory and conditioning blocks."""
    return {
        DailyFocus.UPPER: [MuscleGroup.BICEPS, MuscleGroup.TRICEPS, MuscleGroup.ARMS],
        DailyFocus.LOWER: [MuscleGroup.CALVES, MuscleGroup.CORE],
        DailyFocus.FULL_BODY: [MuscleGroup.SHOULDERS, MuscleGroup.CORE, MuscleGroup.GLUTES],
        DailyFocus.CARDIO: [MuscleGroup.CORE, MuscleGroup.GLUTES],
        DailyFocus.CORE: [MuscleGroup.GLUTES, MuscleGroup.BACK],
        DailyFocus.SURPRISE: [MuscleGroup.CORE],
    }[focus]
