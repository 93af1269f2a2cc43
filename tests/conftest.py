"""Shared fixtures for the workout pipeline tests."""

import json
import sys
from pathlib import Path
from uuid import uuid4

import pytest
from loguru import logger

from fittoday.blueprint_engine import WorkoutBlueprintEngine
from fittoday.blueprint_schemas import BlueprintInput
from fittoday.composer import BlueprintPlanComposer
from fittoday.schemas import (
    DailyFocus,
    ExercisePrescription,
    FitnessGoal,
    MuscleSorenessLevel,
    TrainingLevel,
    TrainingStructure,
    WorkoutExercise,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str):
    """Load a JSON fixture by file name."""
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


def update_exercises(plan, kind=None, **updates):
    """
    Copy a plan with every exercise prescription updated.

    Args:
        plan: WorkoutPlan to copy
        kind: Only touch phases of this PhaseKind (all phases if None)
        **updates: ExercisePrescription fields to replace
    """
    phases = []
    for phase in plan.phases:
        if kind is not None and phase.kind != kind:
            phases.append(phase)
            continue
        items = [
            item.model_copy(update=updates) if isinstance(item, ExercisePrescription) else item
            for item in phase.items
        ]
        phases.append(phase.model_copy(update={"items": items}))
    return plan.model_copy(update={"phases": phases})


def renamed_plan(plan, id_map):
    """Copy a plan replacing exercise ids (and names) according to id_map."""
    phases = []
    for phase in plan.phases:
        items = []
        for item in phase.items:
            if isinstance(item, ExercisePrescription) and item.exercise.id in id_map:
                new_id = id_map[item.exercise.id]
                exercise = item.exercise.model_copy(update={"id": new_id, "name": new_id})
                item = item.model_copy(update={"exercise": exercise})
            items.append(item)
        phases.append(phase.model_copy(update={"items": items}))
    return plan.model_copy(update={"phases": phases, "id": uuid4()})


@pytest.fixture(autouse=True)
def reset_logger():
    """Restore the default loguru sink after each test (the CLI replaces it)."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def catalog():
    """Exercise catalog covering every equipment type and main muscle group."""
    return [WorkoutExercise(**item) for item in load_fixture("exercise_catalog.json")]


@pytest.fixture
def engine():
    return WorkoutBlueprintEngine()


@pytest.fixture
def make_input():
    """Factory for BlueprintInput with sensible defaults and a fixed seed."""

    def _make(
        goal=FitnessGoal.HYPERTROPHY,
        structure=TrainingStructure.FULL_GYM,
        level=TrainingLevel.INTERMEDIATE,
        focus=DailyFocus.UPPER,
        soreness_level=MuscleSorenessLevel.NONE,
        soreness_areas=(),
        energy_level=7,
        variation_seed=42,
    ):
        return BlueprintInput(
            goal=goal,
            structure=structure,
            level=level,
            focus=focus,
            soreness_level=soreness_level,
            soreness_areas=tuple(soreness_areas),
            energy_level=energy_level,
            variation_seed=variation_seed,
        )

    return _make


@pytest.fixture
def make_blueprint(engine, make_input):
    """Factory that generates a blueprint from BlueprintInput keyword arguments."""

    def _make(**kwargs):
        return engine.generate_blueprint_from_input(make_input(**kwargs))

    return _make


@pytest.fixture
def make_plan(make_blueprint, catalog):
    """Factory returning (blueprint, composed plan) for BlueprintInput keyword arguments."""
    composer = BlueprintPlanComposer()

    def _make(**kwargs):
        blueprint = make_blueprint(**kwargs)
        return blueprint, composer.compose(blueprint, catalog)

    return _make
