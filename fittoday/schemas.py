"""
Pydantic models for workout plan generation.

This module defines the core data structures for:
- User Profiles and Daily Check-ins: the inputs supplied by the app
- Exercise Catalog entries: resolved upstream by the exercise database
- Workout Plans: phased sessions made of exercise prescriptions and guided activities
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# Enumerations
# ============================================================================

class FitnessGoal(str, Enum):
    """Main objective declared in the user profile."""
    HYPERTROPHY = "hypertrophy"
    CONDITIONING = "conditioning"
    ENDURANCE = "endurance"
    WEIGHT_LOSS = "weightLoss"
    PERFORMANCE = "performance"


class TrainingStructure(str, Enum):
    """Where the user trains, which determines the available equipment."""
    FULL_GYM = "fullGym"
    BASIC_GYM = "basicGym"
    HOME_DUMBBELLS = "homeDumbbells"
    BODYWEIGHT = "bodyweight"


class TrainingMethod(str, Enum):
    """Preferred training method."""
    TRADITIONAL = "traditional"
    CIRCUIT = "circuit"
    HIIT = "hiit"
    MIXED = "mixed"


class TrainingLevel(str, Enum):
    """Self-reported training experience."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class HealthCondition(str, Enum):
    """Health conditions the user reported during onboarding."""
    NONE = "none"
    LOWER_BACK_PAIN = "lowerBackPain"
    KNEE = "knee"
    SHOULDER = "shoulder"
    OTHER = "other"


class DailyFocus(str, Enum):
    """Body region the user wants to train today."""
    UPPER = "upper"
    LOWER = "lower"
    FULL_BODY = "fullBody"
    CARDIO = "cardio"
    CORE = "core"
    SURPRISE = "surprise"


class MuscleSorenessLevel(str, Enum):
    """Delayed onset muscle soreness (DOMS) reported in the check-in."""
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    STRONG = "strong"


class MuscleGroup(str, Enum):
    """Muscle groups used for targeting and avoidance."""
    CHEST = "chest"
    BACK = "back"
    LATS = "lats"
    LOWER_BACK = "lowerBack"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"
    ARMS = "arms"
    CORE = "core"
    GLUTES = "glutes"
    QUADS = "quads"
    QUADRICEPS = "quadriceps"
    HAMSTRINGS = "hamstrings"
    CALVES = "calves"
    FULL_BODY = "fullBody"
    CARDIO_SYSTEM = "cardioSystem"


class EquipmentType(str, Enum):
    """Equipment an exercise requires."""
    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    MACHINE = "machine"
    KETTLEBELL = "kettlebell"
    BODYWEIGHT = "bodyweight"
    RESISTANCE_BAND = "resistanceBand"
    CARDIO_MACHINE = "cardioMachine"
    CABLE = "cable"
    PULLUP_BAR = "pullupBar"


class PhaseKind(str, Enum):
    """Session phases, declared in canonical execution order."""
    WARMUP = "warmup"
    STRENGTH = "strength"
    ACCESSORY = "accessory"
    CONDITIONING = "conditioning"
    AEROBIC = "aerobic"
    FINISHER = "finisher"
    COOLDOWN = "cooldown"


CANONICAL_PHASE_ORDER: List[PhaseKind] = list(PhaseKind)


def phase_order_index(kind: PhaseKind) -> int:
    """Position of a phase kind in the canonical order (unknown kinds sort last)."""
    try:
        return CANONICAL_PHASE_ORDER.index(kind)
    except ValueError:
        return len(CANONICAL_PHASE_ORDER)


class ActivityKind(str, Enum):
    """Guided activities that are prescribed by duration instead of sets."""
    MOBILITY = "mobility"
    AEROBIC_ZONE_2 = "aerobicZone2"
    AEROBIC_INTERVALS = "aerobicIntervals"
    BREATHING = "breathing"
    COOLDOWN = "cooldown"


class WorkoutIntensity(str, Enum):
    """Overall session intensity tier (low < moderate < high)."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    @property
    def tier(self) -> int:
        """Ordinal position of the tier, 0 for low."""
        return INTENSITY_ORDER.index(self)


INTENSITY_ORDER: List[WorkoutIntensity] = [
    WorkoutIntensity.LOW,
    WorkoutIntensity.MODERATE,
    WorkoutIntensity.HIGH,
]


# ============================================================================
# Ranges
# ============================================================================

class IntRange(BaseModel):
    """
    Inclusive integer range (e.g., sets 3-4, reps 8-12).

    Bounds given in reverse order are swapped rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    lower_bound: int = Field(..., ge=0, description="Inclusive lower bound")
    upper_bound: int = Field(..., ge=0, description="Inclusive upper bound")

    def __init__(self, lower_bound: Optional[int] = None, upper_bound: Optional[int] = None, **data):
        if lower_bound is not None:
            data["lower_bound"] = lower_bound
        if upper_bound is not None:
            data["upper_bound"] = upper_bound
        super().__init__(**data)

    @model_validator(mode="before")
    @classmethod
    def order_bounds(cls, data):
        """Swap bounds given in reverse order."""
        if isinstance(data, dict):
            lower = data.get("lower_bound")
            upper = data.get("upper_bound")
            if isinstance(lower, int) and isinstance(upper, int) and lower > upper:
                data = {**data, "lower_bound": upper, "upper_bound": lower}
        return data

    def contains(self, value: int) -> bool:
        return self.lower_bound <= value <= self.upper_bound

    def clamp(self, value: int) -> int:
        return min(max(value, self.lower_bound), self.upper_bound)

    @property
    def average(self) -> int:
        return (self.lower_bound + self.upper_bound) // 2

    @property
    def display(self) -> str:
        if self.lower_bound == self.upper_bound:
            return f"{self.lower_bound}"
        return f"{self.lower_bound}-{self.upper_bound}"


# ============================================================================
# User Profile and Daily Check-in
# ============================================================================

class UserProfile(BaseModel):
    """
    Training context captured during onboarding.

    Supplied by the profile repository; the pipeline only reads it.
    """

    id: UUID = Field(default_factory=uuid4, description="Unique profile identifier")

    main_goal: FitnessGoal = Field(..., description="Primary training objective")

    available_structure: TrainingStructure = Field(
        ...,
        description="Training location, which determines the equipment available"
    )

    preferred_method: TrainingMethod = Field(
        default=TrainingMethod.MIXED,
        description="Preferred training method"
    )

    level: TrainingLevel = Field(..., description="Training experience level")

    health_conditions: List[HealthCondition] = Field(
        default_factory=list,
        description="Reported health conditions"
    )

    weekly_frequency: int = Field(
        default=3,
        description="Planned sessions per week (at least 1)"
    )

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="When the profile was created"
    )

    @field_validator("weekly_frequency")
    @classmethod
    def clamp_weekly_frequency(cls, v: int) -> int:
        """Weekly frequency is never below one session."""
        return max(1, v)


class DailyCheckIn(BaseModel):
    """How the user feels today and what they want to train."""

    focus: DailyFocus = Field(..., description="Body region for today's session")

    soreness_level: MuscleSorenessLevel = Field(
        default=MuscleSorenessLevel.NONE,
        description="Reported DOMS level"
    )

    soreness_areas: List[MuscleGroup] = Field(
        default_factory=list,
        description="Muscle groups that are sore"
    )

    energy_level: int = Field(
        default=5,
        ge=0,
        le=10,
        description="Self-reported energy (0 = exhausted, 10 = fully rested)"
    )

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="When the check-in was answered"
    )


# ============================================================================
# Exercise Catalog
# ============================================================================

class WorkoutExercise(BaseModel):
    """A catalog exercise resolved by the exercise database."""

    id: str = Field(..., min_length=1, description="Stable catalog identifier")
    name: str = Field(..., min_length=1, description="Display name")
    main_muscle: MuscleGroup = Field(..., description="Primary muscle worked")
    equipment: EquipmentType = Field(..., description="Equipment required")
    instructions: List[str] = Field(
        default_factory=list,
        description="Step-by-step execution cues"
    )


# ============================================================================
# Workout Plan
# ============================================================================

class ExercisePrescription(BaseModel):
    """A catalog exercise bound to sets, reps and rest."""

    type: Literal["exercise"] = "exercise"
    exercise: WorkoutExercise = Field(..., description="The prescribed exercise")
    sets: int = Field(..., ge=0, description="Number of working sets")
    reps: IntRange = Field(..., description="Repetition range per set")
    rest_seconds: int = Field(..., ge=0, description="Rest between sets (seconds)")
    tip: Optional[str] = Field(None, description="Coaching cue")


class ActivityPrescription(BaseModel):
    """Guided activity prescribed by duration (mobility, zone 2, intervals...)."""

    type: Literal["activity"] = "activity"
    kind: ActivityKind = Field(..., description="Kind of guided activity")
    title: str = Field(..., min_length=1, description="Display title")
    duration_minutes: int = Field(..., ge=0, description="Activity duration in minutes")
    notes: Optional[str] = Field(None, description="Additional guidance")


WorkoutPlanItem = Annotated[
    Union[ExercisePrescription, ActivityPrescription],
    Field(discriminator="type"),
]


class WorkoutPlanPhase(BaseModel):
    """One phase of a session (warmup, strength, aerobic...) with ordered items."""

    id: UUID = Field(default_factory=uuid4, description="Phase identifier")
    kind: PhaseKind = Field(..., description="Phase kind")
    title: str = Field(..., description="Display title")
    rpe_target: Optional[int] = Field(
        None, ge=0, le=10, description="Target rate of perceived exertion"
    )
    items: List[WorkoutPlanItem] = Field(
        default_factory=list, description="Exercises and guided activities, in order"
    )

    @property
    def exercises(self) -> List[ExercisePrescription]:
        return [item for item in self.items if isinstance(item, ExercisePrescription)]

    @property
    def activities(self) -> List[ActivityPrescription]:
        return [item for item in self.items if isinstance(item, ActivityPrescription)]


class WorkoutPlan(BaseModel):
    """
    Concrete workout with real exercises bound to prescriptions.

    Produced by a composer from a blueprint, then accepted or rejected by the
    quality gate.
    """

    id: UUID = Field(default_factory=uuid4, description="Plan identifier")
    title: str = Field(..., description="Display title")
    focus: DailyFocus = Field(..., description="Focus the plan was built for")
    estimated_duration_minutes: int = Field(
        ..., ge=0, description="Estimated session duration in minutes"
    )
    intensity: WorkoutIntensity = Field(..., description="Overall intensity tier")
    phases: List[WorkoutPlanPhase] = Field(
        default_factory=list, description="Ordered session phases"
    )
    created_at: datetime = Field(
        default_factory=datetime.now, description="When the plan was composed"
    )

    @property
    def exercises(self) -> List[ExercisePrescription]:
        """Flat list of exercise prescriptions across all phases."""
        return [exercise for phase in self.phases for exercise in phase.exercises]

    @property
    def exercise_ids(self) -> List[str]:
        return [prescription.exercise.id for prescription in self.exercises]

    @property
    def item_count(self) -> int:
        return sum(len(phase.items) for phase in self.phases)
