"""
Quality gate for composed workout plans.

Runs a plan through five stages:
1. Structural validation against the blueprint (critical issues stop here)
2. Normalization into the blueprint's ranges
3. Structural diversity against recent history
4. Exercise identity rule (most exercises must be new)
5. Acceptance of the normalized plan

Every outcome is returned as a QualityGateResult. Rejected results can be
turned into retry feedback for the composer.
"""

from typing import List, Optional, Sequence

from loguru import logger

from fittoday.blueprint_schemas import WorkoutBlueprint
from fittoday.config import QualityGateConfig
from fittoday.diversity_gate import ExerciseDiversityRule, WorkoutDiversityGate
from fittoday.gate_schemas import QualityGateResult, QualityGateStatus
from fittoday.normalizer import WorkoutPlanNormalizer
from fittoday.schemas import WorkoutPlan
from fittoday.validator import BlueprintPlanValidator


class WorkoutPlanQualityGate:
    """
    Decides whether a composed plan is acceptable.

    Example:
        >>> gate = WorkoutPlanQualityGate()
        >>> result = gate.process(plan, blueprint, previous_plans=history)
        >>> if not result.succeeded:
        ...     feedback = gate.generate_retry_feedback(result)
    """

    def __init__(self, config: Optional[QualityGateConfig] = None):
        """
        Initialize the gate and its stages with a shared configuration.

        Args:
            config: Gate configuration (defaults if omitted)
        """
        self.config = config or QualityGateConfig()
        self.validator = BlueprintPlanValidator(self.config)
        self.normalizer = WorkoutPlanNormalizer(self.config)
        self.diversity_gate = WorkoutDiversityGate(self.config)
        self.exercise_diversity_rule = ExerciseDiversityRule(self.config)

    def process(
        self,
        plan: WorkoutPlan,
        blueprint: WorkoutBlueprint,
        previous_plans: Sequence[WorkoutPlan] = (),
    ) -> QualityGateResult:
        """
        Run a plan through every stage of the gate.

        Args:
            plan: Composed plan to check
            blueprint: Blueprint the plan was composed from
            previous_plans: Recent history, oldest to newest

        Returns:
            QualityGateResult; final_plan is set only when the plan passed
        """
        # 1. Structural validation
        validation = self.validator.validate(plan, blueprint)
        if validation.has_critical_issues:
            logger.warning(
                "[QUALITY_GATE] Rejected: critical validation issues",
                plan_id=str(plan.id),
                issues=[issue.code.value for issue in validation.issues if issue.is_critical],
            )
            return QualityGateResult(
                status=QualityGateStatus.FAILED_VALIDATION,
                original_plan=plan,
                final_plan=None,
                validation_result=validation,
            )

        # 2. Normalization
        normalized = self.normalizer.normalize(plan, blueprint)
        was_normalized = normalized.model_dump() != plan.model_dump()

        # 3. Structural diversity
        diversity = self.diversity_gate.analyze(normalized, previous_plans)
        if not diversity.passes_gate:
            logger.warning(
                "[QUALITY_GATE] Rejected: plan too similar to recent history",
                plan_id=str(plan.id),
                score=round(diversity.score, 3),
                minimum=self.config.minimum_structural_diversity,
            )
            return QualityGateResult(
                status=QualityGateStatus.FAILED_DIVERSITY,
                original_plan=plan,
                final_plan=None,
                validation_result=validation,
                diversity_result=diversity,
            )

        # 4. Exercise identity
        exercise_diversity = self.exercise_diversity_rule.evaluate(normalized, previous_plans)
        if not exercise_diversity.is_valid:
            logger.warning(
                "[QUALITY_GATE] Rejected: too many repeated exercises",
                plan_id=str(plan.id),
                score=round(exercise_diversity.score, 3),
                repeated=exercise_diversity.repeated_exercise_ids,
            )
            return QualityGateResult(
                status=QualityGateStatus.FAILED_EXERCISE_DIVERSITY,
                original_plan=plan,
                final_plan=None,
                validation_result=validation,
                diversity_result=diversity,
                exercise_diversity_result=exercise_diversity,
            )

        # 5. Accept
        status = (
            QualityGateStatus.NORMALIZED_AND_PASSED if was_normalized
            else QualityGateStatus.PASSED
        )
        logger.info(
            "[QUALITY_GATE] Plan accepted",
            plan_id=str(plan.id),
            status=status.value,
            diversity=round(diversity.score, 3),
            exercise_diversity=round(exercise_diversity.score, 3),
            issues=len(validation.issues),
        )
        return QualityGateResult(
            status=status,
            original_plan=plan,
            final_plan=normalized,
            validation_result=validation,
            diversity_result=diversity,
            exercise_diversity_result=exercise_diversity,
        )

    def generate_retry_feedback(self, result: QualityGateResult) -> Optional[str]:
        """
        Build corrective feedback for the composer after a rejection.

        Args:
            result: Result returned by process()

        Returns:
            Feedback text (pt-BR), or None when the plan was accepted
        """
        if result.succeeded:
            return None

        lines: List[str] = []

        if result.status == QualityGateStatus.FAILED_VALIDATION:
            # Critical issues first so they survive the limit
            issues = sorted(result.validation_result.issues, key=lambda issue: not issue.is_critical)
            lines.append("O treino anterior teve problemas de estrutura:")
            for issue in issues[:self.config.feedback_issue_limit]:
                lines.append(f"- {issue.message}")
            lines.append("Por favor, corrija e gere novamente respeitando o blueprint.")

        elif result.status == QualityGateStatus.FAILED_DIVERSITY:
            if result.diversity_result is not None:
                similarity = int(round(result.diversity_result.similarity * 100))
                lines.append(
                    f"O treino gerado é muito similar aos anteriores (similaridade: {similarity}%)."
                )
            else:
                lines.append("O treino gerado é muito similar aos anteriores.")
            lines.append("Por favor, varie mais os exercícios e a ordem de execução.")
            lines.append("Use a seed de variação para garantir diferenciação.")

        elif result.status == QualityGateStatus.FAILED_EXERCISE_DIVERSITY:
            exercise_diversity = result.exercise_diversity_result
            lines.append("⚠️ ATENÇÃO: o treino repetiu exercícios demais dos treinos anteriores.")
            if exercise_diversity is None:
                required = int(round(self.config.minimum_exercise_uniqueness * 100))
                lines.append(f"Pelo menos {required}% dos exercícios devem ser novos.")
            else:
                required = int(round(exercise_diversity.minimum_required * 100))
                achieved = int(round(exercise_diversity.score * 100))
                lines.append(
                    f"Pelo menos {required}% dos exercícios devem ser novos "
                    f"(obtido: {achieved}%)."
                )
            if exercise_diversity is not None and exercise_diversity.repeated_exercise_ids:
                lines.append(
                    "Exercícios repetidos: "
                    + ", ".join(exercise_diversity.repeated_exercise_ids)
                )
            lines.append("Substitua-os por exercícios diferentes para o mesmo grupo muscular.")

        return "\n".join(lines)
