"""
Tests for session rules.

Covers goal to session type mapping, DOMS adjustments, the intensity table,
titles and focus muscle targets.
"""

import pytest

from fittoday.schemas import (
    DailyFocus,
    FitnessGoal,
    MuscleGroup,
    MuscleSorenessLevel,
    TrainingLevel,
    WorkoutIntensity,
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


def test_session_type_for_every_goal():
    assert session_type_for_goal(FitnessGoal.HYPERTROPHY) == SessionType.STRENGTH
    assert session_type_for_goal(FitnessGoal.PERFORMANCE) == SessionType.PERFORMANCE
    assert session_type_for_goal(FitnessGoal.WEIGHT_LOSS) == SessionType.WEIGHT_LOSS
    assert session_type_for_goal(FitnessGoal.CONDITIONING) == SessionType.CONDITIONING
    assert session_type_for_goal(FitnessGoal.ENDURANCE) == SessionType.ENDURANCE


def test_doms_no_change_for_none_and_light():
    assert doms_adjustment_for(MuscleSorenessLevel.NONE) == DOMSAdjustment()
    assert doms_adjustment_for(MuscleSorenessLevel.LIGHT) == DOMSAdjustment()


def test_doms_moderate():
    adjustment = doms_adjustment_for(MuscleSorenessLevel.MODERATE)

    assert adjustment.volume_multiplier == 0.9
    assert adjustment.avoid_failure
    assert adjustment.extra_rest_seconds == 15
    assert not adjustment.intensity_reduction


def test_doms_strong():
    adjustment = doms_adjustment_for(MuscleSorenessLevel.STRONG)

    assert adjustment.volume_multiplier == 0.7
    assert adjustment.intensity_reduction
    assert adjustment.avoid_plyometrics
    assert adjustment.substitute_high_impact
    assert adjustment.extra_rest_seconds == 30


@pytest.mark.parametrize("level,soreness,goal,expected", [
    (TrainingLevel.ADVANCED, MuscleSorenessLevel.STRONG, FitnessGoal.HYPERTROPHY, WorkoutIntensity.LOW),
    (TrainingLevel.ADVANCED, MuscleSorenessLevel.NONE, FitnessGoal.PERFORMANCE, WorkoutIntensity.HIGH),
    (TrainingLevel.ADVANCED, MuscleSorenessLevel.NONE, FitnessGoal.ENDURANCE, WorkoutIntensity.MODERATE),
    (TrainingLevel.INTERMEDIATE, MuscleSorenessLevel.MODERATE, FitnessGoal.HYPERTROPHY, WorkoutIntensity.LOW),
    (TrainingLevel.BEGINNER, MuscleSorenessLevel.NONE, FitnessGoal.HYPERTROPHY, WorkoutIntensity.MODERATE),
    (TrainingLevel.INTERMEDIATE, MuscleSorenessLevel.LIGHT, FitnessGoal.HYPERTROPHY, WorkoutIntensity.HIGH),
    (TrainingLevel.BEGINNER, MuscleSorenessLevel.NONE, FitnessGoal.WEIGHT_LOSS, WorkoutIntensity.MODERATE),
])
def test_intensity_table(level, soreness, goal, expected):
    assert intensity_for(level, soreness, goal) == expected


def test_low_energy_never_below_low():
    assert intensity_for(
        TrainingLevel.BEGINNER, MuscleSorenessLevel.STRONG, FitnessGoal.ENDURANCE, energy_level=0
    ) == WorkoutIntensity.LOW


def test_energy_threshold_is_inclusive():
    args = (TrainingLevel.INTERMEDIATE, MuscleSorenessLevel.NONE, FitnessGoal.HYPERTROPHY)

    assert intensity_for(*args, energy_level=4) == WorkoutIntensity.HIGH
    assert intensity_for(*args, energy_level=3) == WorkoutIntensity.MODERATE


def test_session_titles():
    assert session_title(DailyFocus.UPPER, FitnessGoal.HYPERTROPHY) == "Upper Força"
    assert session_title(DailyFocus.SURPRISE, FitnessGoal.ENDURANCE) == "Mix Endurance"
    assert session_title(DailyFocus.FULL_BODY, FitnessGoal.WEIGHT_LOSS, is_recovery=True) == (
        "Full Body Fat Burn (Recovery)"
    )


@pytest.mark.parametrize("focus", list(DailyFocus))
def test_every_focus_has_muscle_targets(focus):
    assert primary_muscles_for(focus)
    assert secondary_muscles_for(focus)


def test_lower_focus_targets():
    assert MuscleGroup.GLUTES in primary_muscles_for(DailyFocus.LOWER)
    assert secondary_muscles_for(DailyFocus.LOWER) == [MuscleGroup.CALVES, MuscleGroup.CORE]
