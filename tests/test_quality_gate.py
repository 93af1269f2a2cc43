"""
End-to-end tests for the WorkoutPlanQualityGate.

Test scenarios:
1. Composed plan with no history passes untouched
2. Out-of-range prescriptions are normalized and accepted
3. Critical validation issues reject the plan before normalization
4. Plans identical to history fail structural diversity
5. Plans reusing old exercises fail the exercise identity rule
6. Retry feedback for every rejection
"""

import pytest

from conftest import load_fixture, renamed_plan, update_exercises
from fittoday.config import QualityGateConfig
from fittoday.gate_schemas import (
    IssueCode,
    PlanValidationResult,
    QualityGateResult,
    QualityGateStatus,
)
from fittoday.quality_gate import WorkoutPlanQualityGate
from fittoday.schemas import (
    EquipmentType,
    FitnessGoal,
    MuscleGroup,
    PhaseKind,
    TrainingStructure,
    WorkoutExercise,
)


@pytest.fixture
def gate():
    return WorkoutPlanQualityGate()


def fresh_copy(plan, keep=()):
    return renamed_plan(plan, {
        exercise_id: f"{exercise_id}_alt"
        for exercise_id in plan.exercise_ids
        if exercise_id not in keep
    })


def with_barbell(plan):
    barbell = WorkoutExercise(
        id="bench_press", name="Supino Reto", main_muscle=MuscleGroup.CHEST,
        equipment=EquipmentType.BARBELL,
    )
    return update_exercises(plan, kind=PhaseKind.STRENGTH, exercise=barbell)


def test_composed_plan_passes(gate, make_plan):
    blueprint, plan = make_plan()
    result = gate.process(plan, blueprint)

    assert result.status == QualityGateStatus.PASSED
    assert result.succeeded
    assert result.final_plan.model_dump() == plan.model_dump()
    assert result.validation_result.is_valid
    assert result.diversity_result.score == 1.0
    assert result.exercise_diversity_result.score == 1.0
    assert gate.generate_retry_feedback(result) is None


def test_out_of_range_sets_normalized(gate, make_plan):
    blueprint, plan = make_plan()
    broken = update_exercises(plan, kind=PhaseKind.STRENGTH, sets=10)

    result = gate.process(broken, blueprint)

    assert result.status == QualityGateStatus.NORMALIZED_AND_PASSED
    assert result.succeeded
    assert not result.validation_result.is_valid
    assert result.original_plan is broken
    sets_range = blueprint.block_for(PhaseKind.STRENGTH).sets_range
    strength = next(p for p in result.final_plan.phases if p.kind == PhaseKind.STRENGTH)
    assert all(sets_range.contains(p.sets) for p in strength.exercises)
    assert gate.generate_retry_feedback(result) is None


def test_disallowed_equipment_rejected(gate, make_plan):
    blueprint, plan = make_plan(structure=TrainingStructure.BODYWEIGHT)
    result = gate.process(with_barbell(plan), blueprint)

    assert result.status == QualityGateStatus.FAILED_VALIDATION
    assert result.final_plan is None
    assert result.diversity_result is None
    assert result.validation_result.has_critical_issues

    feedback = gate.generate_retry_feedback(result)
    assert "problemas de estrutura" in feedback
    assert "Equipamento incompatível" in feedback
    assert feedback.endswith("respeitando o blueprint.")


def test_feedback_lists_critical_issues_first(make_plan):
    gate = WorkoutPlanQualityGate(QualityGateConfig(feedback_issue_limit=1))
    blueprint, plan = make_plan(structure=TrainingStructure.BODYWEIGHT)
    plan = update_exercises(with_barbell(plan), kind=PhaseKind.STRENGTH, sets=10)

    result = gate.process(plan, blueprint)
    codes = [issue.code for issue in result.validation_result.issues]
    assert IssueCode.INVALID_SETS in codes

    issue_lines = [line for line in gate.generate_retry_feedback(result).splitlines() if line.startswith("- ")]
    assert len(issue_lines) == 1
    assert "Equipamento incompatível" in issue_lines[0]


def test_identical_history_never_passes(gate, make_plan):
    blueprint, plan = make_plan()
    result = gate.process(plan, blueprint, previous_plans=[plan])

    assert result.status == QualityGateStatus.FAILED_DIVERSITY
    assert not result.succeeded
    assert result.final_plan is None
    assert result.exercise_diversity_result is None

    feedback = gate.generate_retry_feedback(result)
    assert "muito similar" in feedback
    assert "similaridade: 100%" in feedback


def test_varied_history_passes(gate, make_plan):
    blueprint, plan = make_plan()
    history = [fresh_copy(plan) for _ in range(3)]

    result = gate.process(plan, blueprint, previous_plans=history)

    assert result.status == QualityGateStatus.PASSED
    assert result.diversity_result.compared_plans == 3


def test_old_exercises_fail_identity_rule(gate, make_plan):
    blueprint, plan = make_plan()
    ids = plan.exercise_ids
    # The structural gate only sees the three disjoint recent plans
    history = [fresh_copy(plan, keep=ids[:3])] + [fresh_copy(plan) for _ in range(3)]

    result = gate.process(plan, blueprint, previous_plans=history)

    assert result.diversity_result.passes_gate
    assert result.status == QualityGateStatus.FAILED_EXERCISE_DIVERSITY
    assert result.final_plan is None
    assert result.exercise_diversity_result.repeated_exercise_ids == ids[:3]

    feedback = gate.generate_retry_feedback(result)
    assert "ATENÇÃO" in feedback
    assert "80%" in feedback
    assert "70%" in feedback
    assert ids[0] in feedback


def test_config_from_fixture_relaxes_identity_rule(make_plan):
    config = QualityGateConfig(**load_fixture("quality_gate_config.json"))
    gate = WorkoutPlanQualityGate(config)
    blueprint, plan = make_plan()
    ids = plan.exercise_ids
    history = [fresh_copy(plan, keep=ids[:3])] + [fresh_copy(plan) for _ in range(3)]

    result = gate.process(plan, blueprint, previous_plans=history)

    assert result.status == QualityGateStatus.PASSED
    assert result.diversity_result.compared_plans == 4


def test_strict_structural_threshold(make_plan):
    gate = WorkoutPlanQualityGate(QualityGateConfig(minimum_structural_diversity=0.9))
    blueprint, plan = make_plan()

    result = gate.process(plan, blueprint, previous_plans=[fresh_copy(plan)])

    assert result.status == QualityGateStatus.FAILED_DIVERSITY
    assert "similaridade: 20%" in gate.generate_retry_feedback(result)


def test_empty_plan_rejected(gate, make_plan):
    blueprint, plan = make_plan()
    result = gate.process(plan.model_copy(update={"phases": []}), blueprint)

    assert result.status == QualityGateStatus.FAILED_VALIDATION
    assert [issue.code for issue in result.validation_result.issues] == [IssueCode.EMPTY_PLAN]


def test_missing_goal_phases_rejected(gate, make_plan):
    blueprint, plan = make_plan()
    stripped = plan.model_copy(update={
        "phases": [p for p in plan.phases if p.kind in (PhaseKind.WARMUP, PhaseKind.COOLDOWN)]
    })

    result = gate.process(stripped, blueprint)

    assert result.status == QualityGateStatus.FAILED_VALIDATION
    assert result.final_plan is None
    codes = [issue.code for issue in result.validation_result.issues if issue.is_critical]
    assert codes == [IssueCode.MISSING_PHASE, IssueCode.MISSING_PHASE]
    assert "Fase obrigatória ausente" in gate.generate_retry_feedback(result)


def test_weight_loss_without_aerobic_rejected(gate, make_plan):
    blueprint, plan = make_plan(goal=FitnessGoal.WEIGHT_LOSS)
    no_aerobic = plan.model_copy(update={
        "phases": [p for p in plan.phases if p.kind != PhaseKind.AEROBIC]
    })

    result = gate.process(no_aerobic, blueprint)

    assert result.status == QualityGateStatus.FAILED_VALIDATION
    assert IssueCode.MISSING_AEROBIC_FOR_GOAL in [
        issue.code for issue in result.validation_result.issues
    ]


def test_feedback_without_diversity_payloads(gate, make_plan):
    _, plan = make_plan()
    validation = PlanValidationResult(is_valid=True)

    structural = QualityGateResult(
        status=QualityGateStatus.FAILED_DIVERSITY,
        original_plan=plan,
        validation_result=validation,
    )
    identity = QualityGateResult(
        status=QualityGateStatus.FAILED_EXERCISE_DIVERSITY,
        original_plan=plan,
        validation_result=validation,
    )

    assert "muito similar" in gate.generate_retry_feedback(structural)
    feedback = gate.generate_retry_feedback(identity)
    assert "ATENÇÃO" in feedback
    assert "80%" in feedback
    assert "Exercícios repetidos" not in feedback
