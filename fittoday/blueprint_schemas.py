"""
Pydantic models for workout blueprints.

A blueprint is the structural skeleton of a session (phases, counts, ranges,
rest, RPE, equipment and muscle constraints) before concrete exercises are
chosen. Blueprints are immutable once generated.
"""

import hashlib
import secrets
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fittoday.schemas import (
    ActivityKind,
    DailyCheckIn,
    DailyFocus,
    EquipmentType,
    FitnessGoal,
    IntRange,
    MuscleGroup,
    MuscleSorenessLevel,
    PhaseKind,
    TrainingLevel,
    TrainingStructure,
    UserProfile,
    WorkoutIntensity,
)


class BlueprintVersion(str, Enum):
    """Blueprint format version. Bumping it invalidates every cache key."""
    V1 = "1.0.0"

    @classmethod
    def current(cls) -> "BlueprintVersion":
        return cls.V1


# ============================================================================
# Blueprint Input
# ============================================================================

class BlueprintInput(BaseModel):
    """
    Everything the engine needs to build a blueprint.

    The variation seed is part of the input, so identical semantic inputs with
    different seeds are different inputs (and have different cache keys).
    """

    model_config = ConfigDict(frozen=True)

    goal: FitnessGoal
    structure: TrainingStructure
    level: TrainingLevel
    focus: DailyFocus
    soreness_level: MuscleSorenessLevel = MuscleSorenessLevel.NONE
    soreness_areas: Tuple[MuscleGroup, ...] = Field(
        default=(), description="Sore muscle groups reported in the check-in"
    )
    energy_level: int = Field(default=5, ge=0, le=10, description="Energy 0-10")
    variation_seed: int = Field(
        ..., ge=0, lt=2 ** 64, description="Unsigned 64-bit variation seed"
    )

    @classmethod
    def from_inputs(cls, profile: UserProfile, check_in: DailyCheckIn) -> "BlueprintInput":
        """
        Build an input from a profile and today's check-in.

        A fresh random seed is drawn on every call, so two calls with the same
        profile and check-in never share a cache key.
        """
        return cls(
            goal=profile.main_goal,
            structure=profile.available_structure,
            level=profile.level,
            focus=check_in.focus,
            soreness_level=check_in.soreness_level,
            soreness_areas=tuple(check_in.soreness_areas),
            energy_level=check_in.energy_level,
            variation_seed=secrets.randbits(64),
        )

    @property
    def cache_key(self) -> str:
        """Stable key over version and every field; identical across processes."""
        version = BlueprintVersion.current().value
        areas = ",".join(sorted(area.value for area in self.soreness_areas))
        components = [
            version,
            self.goal.value,
            self.structure.value,
            self.level.value,
            self.focus.value,
            self.soreness_level.value,
            areas,
            str(self.energy_level),
            str(self.variation_seed),
        ]
        digest = hashlib.sha256("|".join(components).encode("utf-8")).hexdigest()
        return f"v{version}:{digest}"


# ============================================================================
# Constraints and Blocks
# ============================================================================

class EquipmentConstraints(BaseModel):
    """Equipment the session may (and may not) use."""

    model_config = ConfigDict(frozen=True)

    allowed_equipment: FrozenSet[EquipmentType] = Field(
        ..., description="Equipment available at the training location"
    )
    forbidden_equipment: FrozenSet[EquipmentType] = Field(
        default=frozenset(), description="Equipment that must not appear"
    )
    prefer_compound_movements: bool = Field(
        default=True, description="Favour multi-joint exercises"
    )

    @field_validator("allowed_equipment")
    @classmethod
    def allowed_not_empty(cls, v: FrozenSet[EquipmentType]) -> FrozenSet[EquipmentType]:
        if not v:
            raise ValueError("allowed_equipment must contain at least one equipment type")
        return v

    @classmethod
    def from_structure(cls, structure: TrainingStructure) -> "EquipmentConstraints":
        """Derive constraints from the training location."""
        allowed = {
            TrainingStructure.BODYWEIGHT: {EquipmentType.BODYWEIGHT},
            TrainingStructure.HOME_DUMBBELLS: {
                EquipmentType.DUMBBELL,
                EquipmentType.BODYWEIGHT,
                EquipmentType.KETTLEBELL,
                EquipmentType.RESISTANCE_BAND,
            },
            TrainingStructure.BASIC_GYM: {
                EquipmentType.MACHINE,
                EquipmentType.DUMBBELL,
                EquipmentType.CABLE,
                EquipmentType.BODYWEIGHT,
                EquipmentType.PULLUP_BAR,
            },
            TrainingStructure.FULL_GYM: set(EquipmentType),
        }[structure]
        return cls(allowed_equipment=frozenset(allowed))

    def permits(self, equipment: EquipmentType) -> bool:
        return equipment in self.allowed_equipment and equipment not in self.forbidden_equipment


class WorkoutBlockBlueprint(BaseModel):
    """Prescription for one phase of the session."""

    model_config = ConfigDict(frozen=True)

    phase_kind: PhaseKind = Field(..., description="Phase this block becomes")
    title: str = Field(..., description="Display title")
    exercise_count: int = Field(..., ge=0, description="Exercises to pick")
    sets_range: IntRange = Field(..., description="Sets per exercise")
    reps_range: IntRange = Field(..., description="Reps per set")
    rest_seconds: int = Field(..., ge=0, description="Rest between sets")
    rpe_target: int = Field(..., ge=0, le=10, description="Target RPE")
    target_muscles: Tuple[MuscleGroup, ...] = Field(default=())
    avoid_muscles: Tuple[MuscleGroup, ...] = Field(default=())
    guided_activity_kind: Optional[ActivityKind] = Field(
        None, description="Guided activity prescribed by duration, if any"
    )
    guided_activity_minutes: int = Field(default=0, ge=0)

    @property
    def includes_guided_activity(self) -> bool:
        return self.guided_activity_kind is not None and self.guided_activity_minutes > 0


# ============================================================================
# Decisions
# ============================================================================

class BlueprintDecision(BaseModel):
    """
    Documents one rule the engine applied while building a blueprint.

    Used to explain why a session looks the way it does.
    """

    model_config = ConfigDict(frozen=True)

    decision_point: str = Field(..., description="What was being decided")
    input_factors: Dict[str, Any] = Field(
        default_factory=dict, description="Inputs that drove the decision"
    )
    reasoning: str = Field(..., description="Why this outcome was chosen")
    outcome: str = Field(..., description="The resulting choice")


# ============================================================================
# Blueprint
# ============================================================================

class WorkoutBlueprint(BaseModel):
    """
    Structural skeleton of a workout session.

    Blocks are always in canonical phase order.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    version: BlueprintVersion = Field(default_factory=BlueprintVersion.current)
    variation_seed: int = Field(..., ge=0, lt=2 ** 64)
    title: str
    focus: DailyFocus
    goal: FitnessGoal
    structure: TrainingStructure
    level: TrainingLevel
    soreness_level: MuscleSorenessLevel = MuscleSorenessLevel.NONE
    intensity: WorkoutIntensity
    estimated_duration_minutes: int = Field(..., ge=0)
    blocks: Tuple[WorkoutBlockBlueprint, ...] = Field(default=())
    equipment_constraints: EquipmentConstraints
    is_recovery_mode: bool = False
    decisions: Tuple[BlueprintDecision, ...] = Field(
        default=(), description="Rules applied while building the blueprint"
    )
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def total_exercise_count(self) -> int:
        return sum(block.exercise_count for block in self.blocks)

    @property
    def strength_blocks(self) -> List[WorkoutBlockBlueprint]:
        """Strength and accessory blocks."""
        return [
            block for block in self.blocks
            if block.phase_kind in (PhaseKind.STRENGTH, PhaseKind.ACCESSORY)
        ]

    @property
    def warmup_block(self) -> Optional[WorkoutBlockBlueprint]:
        return self.block_for(PhaseKind.WARMUP)

    @property
    def aerobic_block(self) -> Optional[WorkoutBlockBlueprint]:
        return self.block_for(PhaseKind.AEROBIC)

    def block_for(self, kind: PhaseKind) -> Optional[WorkoutBlockBlueprint]:
        """First block of the given phase kind, if any."""
        for block in self.blocks:
            if block.phase_kind == kind:
                return block
        return None

    @property
    def inputs_hash(self) -> str:
        """Identifies the inputs this blueprint was generated from."""
        components = [
            self.version.value,
            str(self.variation_seed),
            self.focus.value,
            self.goal.value,
            self.structure.value,
            self.level.value,
            str(self.is_recovery_mode).lower(),
        ]
        return "|".join(components)
