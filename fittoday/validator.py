"""
Structural validation of workout plans against their blueprint.

Checks that a composed plan respects the blueprint it was generated from:
- Required phases are present (critical)
- Exercise counts per phase (within tolerance)
- Sets, reps and rest per exercise (within tolerance)
- Equipment is available and not forbidden (critical)
- Goals that require aerobic work have an aerobic phase (critical)
- Estimated duration is within the blueprint's window
"""

from typing import List, Optional, Tuple

from loguru import logger

from fittoday.blueprint_schemas import WorkoutBlueprint
from fittoday.config import QualityGateConfig
from fittoday.gate_schemas import IssueCode, PlanValidationResult, ValidationIssue
from fittoday.schemas import FitnessGoal, PhaseKind, WorkoutPlan

GOALS_REQUIRING_AEROBIC = frozenset({
    FitnessGoal.WEIGHT_LOSS,
    FitnessGoal.CONDITIONING,
    FitnessGoal.ENDURANCE,
})


def duration_window(blueprint: WorkoutBlueprint, config: QualityGateConfig) -> Tuple[int, int]:
    """Acceptable (min, max) plan duration in minutes for a blueprint."""
    estimated = blueprint.estimated_duration_minutes
    lower = max(15, estimated - config.duration_lower_slack_minutes)
    upper = estimated + config.duration_upper_slack_minutes
    return lower, upper


class BlueprintPlanValidator:
    """
    Validates a WorkoutPlan against the WorkoutBlueprint it was built from.

    Empty inputs, equipment violations and missing phases are critical;
    every other issue can be repaired by the normalizer.
    """

    def __init__(self, config: Optional[QualityGateConfig] = None):
        """
        Initialize the validator.

        Args:
            config: Gate configuration (defaults if omitted)
        """
        self.config = config or QualityGateConfig()

    def validate(self, plan: WorkoutPlan, blueprint: WorkoutBlueprint) -> PlanValidationResult:
        """
        Validate a plan against its blueprint.

        Args:
            plan: Composed workout plan
            blueprint: Blueprint the plan was composed from

        Returns:
            PlanValidationResult with every issue found
        """
        issues: List[ValidationIssue] = []

        if not blueprint.blocks:
            issues.append(ValidationIssue.of(
                IssueCode.EMPTY_BLUEPRINT, "Blueprint sem blocos: impossível validar o treino"
            ))
        if plan.item_count == 0:
            issues.append(ValidationIssue.of(
                IssueCode.EMPTY_PLAN, "Treino vazio: nenhuma fase com exercícios ou atividades"
            ))

        if not issues:
            issues.extend(self._validate_required_phases(plan, blueprint))
            issues.extend(self._validate_exercise_counts(plan, blueprint))
            issues.extend(self._validate_prescriptions(plan, blueprint))
            issues.extend(self._validate_equipment(plan, blueprint))
            issues.extend(self._validate_aerobic_requirement(plan, blueprint.goal))
            issues.extend(self._validate_duration(plan, blueprint))

        result = PlanValidationResult(is_valid=not issues, issues=issues)

        logger.debug(
            "[VALIDATION] Plan checked against blueprint",
            plan_id=str(plan.id),
            issues=len(issues),
            critical=sum(1 for issue in issues if issue.is_critical),
        )
        return result

    def _validate_required_phases(
        self, plan: WorkoutPlan, blueprint: WorkoutBlueprint
    ) -> List[ValidationIssue]:
        present = {phase.kind for phase in plan.phases}
        issues = []
        seen = set()
        for block in blueprint.blocks:
            if block.phase_kind in present or block.phase_kind in seen:
                continue
            seen.add(block.phase_kind)
            issues.append(ValidationIssue.of(
                IssueCode.MISSING_PHASE,
                f"Fase obrigatória ausente: {block.phase_kind.value}",
            ))
        return issues

    def _validate_exercise_counts(
        self, plan: WorkoutPlan, blueprint: WorkoutBlueprint
    ) -> List[ValidationIssue]:
        tolerance = self.config.exercise_count_tolerance
        issues = []
        for block in blueprint.blocks:
            if block.exercise_count <= 0:
                continue
            phase = next((p for p in plan.phases if p.kind == block.phase_kind), None)
            actual = len(phase.exercises) if phase else 0
            minimum = max(1, block.exercise_count - tolerance)
            maximum = block.exercise_count + tolerance

            if actual < minimum:
                issues.append(ValidationIssue.of(
                    IssueCode.TOO_FEW_EXERCISES,
                    f"Exercícios insuficientes em {block.title}: "
                    f"esperado {block.exercise_count}, recebido {actual}",
                ))
            elif actual > maximum:
                issues.append(ValidationIssue.of(
                    IssueCode.TOO_MANY_EXERCISES,
                    f"Exercícios em excesso em {block.title}: "
                    f"esperado {block.exercise_count}, recebido {actual}",
                ))
        return issues

    def _validate_prescriptions(
        self, plan: WorkoutPlan, blueprint: WorkoutBlueprint
    ) -> List[ValidationIssue]:
        config = self.config
        issues = []
        for phase in plan.phases:
            block = blueprint.block_for(phase.kind)
            if block is None:
                continue

            sets_min = block.sets_range.lower_bound - config.sets_tolerance
            sets_max = block.sets_range.upper_bound + config.sets_tolerance
            reps_min = max(1, block.reps_range.lower_bound - config.reps_tolerance)
            reps_max = block.reps_range.upper_bound + config.reps_tolerance
            rest_min = max(0, block.rest_seconds - config.rest_min_slack_seconds)
            rest_max = block.rest_seconds + config.rest_max_slack_seconds

            for prescription in phase.exercises:
                name = prescription.exercise.name
                if not sets_min <= prescription.sets <= sets_max:
                    issues.append(ValidationIssue.of(
                        IssueCode.INVALID_SETS,
                        f"Séries inválidas em {name}: {prescription.sets}, "
                        f"esperado {block.sets_range.display}",
                    ))
                if prescription.reps.upper_bound < reps_min or prescription.reps.lower_bound > reps_max:
                    issues.append(ValidationIssue.of(
                        IssueCode.INVALID_REPS,
                        f"Reps inválidas em {name}: {prescription.reps.display}, "
                        f"esperado {block.reps_range.display}",
                    ))
                if not rest_min <= prescription.rest_seconds <= rest_max:
                    issues.append(ValidationIssue.of(
                        IssueCode.INVALID_REST,
                        f"Descanso inválido em {name}: {prescription.rest_seconds}s, "
                        f"esperado {rest_min}-{rest_max}s",
                    ))
        return issues

    def _validate_equipment(
        self, plan: WorkoutPlan, blueprint: WorkoutBlueprint
    ) -> List[ValidationIssue]:
        constraints = blueprint.equipment_constraints
        allowed = ", ".join(sorted(e.value for e in constraints.allowed_equipment))
        issues = []
        for prescription in plan.exercises:
            exercise = prescription.exercise
            if exercise.equipment in constraints.forbidden_equipment:
                issues.append(ValidationIssue.of(
                    IssueCode.FORBIDDEN_EQUIPMENT,
                    f"Equipamento proibido em {exercise.name}: {exercise.equipment.value}",
                ))
            elif exercise.equipment not in constraints.allowed_equipment:
                issues.append(ValidationIssue.of(
                    IssueCode.INCOMPATIBLE_EQUIPMENT,
                    f"Equipamento incompatível em {exercise.name}: "
                    f"{exercise.equipment.value}, permitidos: {allowed}",
                ))
        return issues

    def _validate_aerobic_requirement(
        self, plan: WorkoutPlan, goal: FitnessGoal
    ) -> List[ValidationIssue]:
        if goal not in GOALS_REQUIRING_AEROBIC:
            return []
        if any(phase.kind == PhaseKind.AEROBIC for phase in plan.phases):
            return []
        return [ValidationIssue.of(
            IssueCode.MISSING_AEROBIC_FOR_GOAL,
            f"Aeróbico obrigatório para objetivo {goal.value} está ausente",
        )]

    def _validate_duration(
        self, plan: WorkoutPlan, blueprint: WorkoutBlueprint
    ) -> List[ValidationIssue]:
        lower, upper = duration_window(blueprint, self.config)
        minutes = plan.estimated_duration_minutes
        if lower <= minutes <= upper:
            return []
        return [ValidationIssue.of(
            IssueCode.DURATION_OUT_OF_RANGE,
            f"Duração fora do range: {minutes} min, esperado {lower}-{upper} min",
        )]
