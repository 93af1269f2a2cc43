"""
Command-line interface for the workout blueprint pipeline.

Provides developer commands for:
- Blueprint generation from goal, location, level and check-in answers
- Local plan composition against an exercise catalog
- Running a plan through the quality gate
"""

import json
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fittoday.blueprint_engine import WorkoutBlueprintEngine
from fittoday.blueprint_schemas import BlueprintInput, WorkoutBlueprint
from fittoday.composer import BlueprintPlanComposer
from fittoday.config import QualityGateConfig
from fittoday.gate_schemas import QualityGateResult
from fittoday.logging_config import configure_logging
from fittoday.quality_gate import WorkoutPlanQualityGate
from fittoday.schemas import (
    ActivityPrescription,
    DailyCheckIn,
    DailyFocus,
    FitnessGoal,
    MuscleGroup,
    MuscleSorenessLevel,
    TrainingLevel,
    TrainingStructure,
    UserProfile,
    WorkoutExercise,
    WorkoutPlan,
)

# Exit code when the gate rejects a plan
GATE_REJECTED_EXIT_CODE = 2

# Initialize Typer app and Rich console
app = typer.Typer(
    help="FitToday workout pipeline - blueprint generation, composition and quality gate"
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """Configure logging before any command runs."""
    configure_logging("DEBUG" if verbose else "WARNING")


# ===== LOADING HELPERS =====


def _load_json(path: Path, what: str) -> Any:
    try:
        with open(path, "r") as f:
            return json.load(f)
    except Exception as e:
        console.print(f"[red]✗ Failed to load {what}: {e}[/red]")
        raise typer.Exit(1)


def _load_model(path: Path, model: type, what: str) -> Any:
    data = _load_json(path, what)
    try:
        return model.model_validate(data)
    except Exception as e:
        console.print(f"[red]✗ Invalid {what} ({path}): {e}[/red]")
        raise typer.Exit(1)


def _load_catalog(path: Path) -> List[WorkoutExercise]:
    data = _load_json(path, "exercise catalog")
    if not isinstance(data, list):
        console.print("[red]✗ Exercise catalog must be a JSON list[/red]")
        raise typer.Exit(1)
    try:
        return [WorkoutExercise.model_validate(item) for item in data]
    except Exception as e:
        console.print(f"[red]✗ Invalid exercise catalog: {e}[/red]")
        raise typer.Exit(1)


def _build_blueprint(
    goal: FitnessGoal,
    structure: TrainingStructure,
    level: TrainingLevel,
    focus: DailyFocus,
    soreness: MuscleSorenessLevel,
    sore_areas: Optional[List[MuscleGroup]],
    energy: int,
    seed: Optional[int],
) -> WorkoutBlueprint:
    try:
        profile = UserProfile(main_goal=goal, available_structure=structure, level=level)
        check_in = DailyCheckIn(
            focus=focus,
            soreness_level=soreness,
            soreness_areas=sore_areas or [],
            energy_level=energy,
        )
        if seed is None:
            blueprint_input = BlueprintInput.from_inputs(profile, check_in)
        else:
            blueprint_input = BlueprintInput(
                goal=goal,
                structure=structure,
                level=level,
                focus=focus,
                soreness_level=soreness,
                soreness_areas=tuple(sore_areas or ()),
                energy_level=energy,
                variation_seed=seed,
            )
    except Exception as e:
        console.print(f"[red]✗ Invalid input: {e}[/red]")
        raise typer.Exit(1)

    return WorkoutBlueprintEngine().generate_blueprint_from_input(blueprint_input)


def _echo_json(model: BaseModel):
    typer.echo(model.model_dump_json(indent=2))


# ===== DISPLAY HELPER FUNCTIONS =====


def _display_blueprint(blueprint: WorkoutBlueprint):
    """
    Display blueprint header, blocks table and engine decisions.

    Args:
        blueprint: Generated WorkoutBlueprint
    """
    recovery = " [yellow](recovery mode)[/yellow]" if blueprint.is_recovery_mode else ""
    console.print(Panel(
        f"[bold]{blueprint.title}[/bold]{recovery}\n"
        f"Intensity: {blueprint.intensity.value} | "
        f"Duration: ~{blueprint.estimated_duration_minutes} min | "
        f"Seed: {blueprint.variation_seed}",
        title="Workout Blueprint",
        box=box.ROUNDED,
    ))

    table = Table(title="Blocks", box=box.ROUNDED)
    table.add_column("Phase", style="cyan")
    table.add_column("Title")
    table.add_column("Exercises", justify="right")
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Rest", justify="right")
    table.add_column("RPE", justify="right", style="yellow")
    table.add_column("Guided")

    for block in blueprint.blocks:
        guided = (
            f"{block.guided_activity_kind.value} {block.guided_activity_minutes}min"
            if block.includes_guided_activity else "-"
        )
        table.add_row(
            block.phase_kind.value,
            block.title,
            str(block.exercise_count),
            block.sets_range.display,
            block.reps_range.display,
            f"{block.rest_seconds}s",
            str(block.rpe_target),
            guided,
        )
    console.print(table)

    allowed = ", ".join(sorted(e.value for e in blueprint.equipment_constraints.allowed_equipment))
    console.print(f"\n[bold]Equipment:[/bold] {allowed}")

    if blueprint.decisions:
        console.print("\n[bold]Decisions:[/bold]")
        for decision in blueprint.decisions:
            console.print(f"  • {decision.decision_point}: [green]{decision.outcome}[/green]")
            console.print(f"    [dim]{decision.reasoning}[/dim]")


def _display_plan(plan: WorkoutPlan):
    """
    Display a composed plan phase by phase.

    Args:
        plan: WorkoutPlan to display
    """
    console.print(f"\n[bold]{plan.title}[/bold] "
                  f"({plan.intensity.value}, ~{plan.estimated_duration_minutes} min)")

    for phase in plan.phases:
        rpe = f" RPE {phase.rpe_target}" if phase.rpe_target is not None else ""
        console.print(f"\n[cyan]{phase.kind.value}[/cyan] - {phase.title}{rpe}")
        for item in phase.items:
            if isinstance(item, ActivityPrescription):
                console.print(f"  ▸ {item.title} ({item.duration_minutes} min)")
            else:
                console.print(
                    f"  • {item.exercise.name} [dim]({item.exercise.id})[/dim]: "
                    f"{item.sets} x {item.reps.display}, rest {item.rest_seconds}s"
                )


def _display_gate_result(gate: WorkoutPlanQualityGate, result: QualityGateResult):
    """
    Display gate status, stage scores, issues and retry feedback.

    Args:
        gate: Gate used to process the plan (for feedback generation)
        result: QualityGateResult
    """
    color = "green" if result.succeeded else "red"
    console.print(f"\n[bold]Status: [{color}]{result.status.value}[/{color}][/bold]")

    table = Table(title="Stages", box=box.ROUNDED)
    table.add_column("Stage", style="cyan")
    table.add_column("Result", justify="right")

    validation = result.validation_result
    table.add_row(
        "Validation",
        f"{len(validation.issues)} issue(s)"
        + (" [red](critical)[/red]" if validation.has_critical_issues else ""),
    )
    if result.diversity_result is not None:
        table.add_row("Structural diversity", f"{result.diversity_result.score:.2f}")
    if result.exercise_diversity_result is not None:
        table.add_row("Exercise diversity", f"{result.exercise_diversity_result.score:.0%}")
    console.print(table)

    if validation.issues:
        console.print("\n[bold]Issues:[/bold]")
        for issue in validation.issues:
            marker = "[red]✗[/red]" if issue.is_critical else "[yellow]⚠[/yellow]"
            console.print(f"  {marker} {issue.message}")

    feedback = gate.generate_retry_feedback(result)
    if feedback:
        console.print(Panel(feedback, title="Retry feedback", box=box.ROUNDED))


# ===== COMMANDS =====


@app.command()
def blueprint(
    goal: FitnessGoal = typer.Option(..., "--goal", "-g", help="Fitness goal"),
    structure: TrainingStructure = typer.Option(..., "--structure", "-s", help="Training location"),
    level: TrainingLevel = typer.Option(TrainingLevel.INTERMEDIATE, "--level", "-l", help="Training level"),
    focus: DailyFocus = typer.Option(DailyFocus.FULL_BODY, "--focus", "-f", help="Today's focus"),
    soreness: MuscleSorenessLevel = typer.Option(
        MuscleSorenessLevel.NONE, "--soreness", help="Muscle soreness level"
    ),
    sore_areas: Optional[List[MuscleGroup]] = typer.Option(
        None, "--sore-area", help="Sore muscle group (repeatable; avoided when soreness is strong)"
    ),
    energy: int = typer.Option(5, "--energy", "-e", help="Energy level (0-10)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Variation seed (random if omitted)"),
    as_json: bool = typer.Option(False, "--json", help="Print the blueprint as JSON"),
):
    """
    Generate a workout blueprint.
    """
    generated = _build_blueprint(goal, structure, level, focus, soreness, sore_areas, energy, seed)
    if as_json:
        _echo_json(generated)
        return
    _display_blueprint(generated)


@app.command()
def compose(
    catalog: Path = typer.Argument(..., help="Exercise catalog JSON (list of exercises)", exists=True),
    goal: FitnessGoal = typer.Option(..., "--goal", "-g", help="Fitness goal"),
    structure: TrainingStructure = typer.Option(..., "--structure", "-s", help="Training location"),
    level: TrainingLevel = typer.Option(TrainingLevel.INTERMEDIATE, "--level", "-l", help="Training level"),
    focus: DailyFocus = typer.Option(DailyFocus.FULL_BODY, "--focus", "-f", help="Today's focus"),
    soreness: MuscleSorenessLevel = typer.Option(
        MuscleSorenessLevel.NONE, "--soreness", help="Muscle soreness level"
    ),
    sore_areas: Optional[List[MuscleGroup]] = typer.Option(
        None, "--sore-area", help="Sore muscle group (repeatable; avoided when soreness is strong)"
    ),
    energy: int = typer.Option(5, "--energy", "-e", help="Energy level (0-10)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Variation seed (random if omitted)"),
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
):
    """
    Generate a blueprint and compose a plan from an exercise catalog.
    """
    exercises = _load_catalog(catalog)
    generated = _build_blueprint(goal, structure, level, focus, soreness, sore_areas, energy, seed)
    plan = BlueprintPlanComposer().compose(generated, exercises)

    if as_json:
        _echo_json(plan)
        return
    _display_plan(plan)


@app.command()
def gate(
    plan_path: Path = typer.Argument(..., help="Workout plan JSON", exists=True),
    blueprint_path: Path = typer.Argument(..., help="Blueprint JSON the plan was composed from", exists=True),
    history: Optional[List[Path]] = typer.Option(
        None,
        "--history",
        "-H",
        help="Previous plan JSON (repeatable, oldest first)",
        exists=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Quality gate config JSON",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the gate result as JSON"),
):
    """
    Run a plan through the quality gate.

    Exits with code 0 when the plan is accepted and 2 when it is rejected.
    """
    gate_config = QualityGateConfig()
    if config is not None:
        try:
            gate_config = QualityGateConfig.from_file(config)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]✗ Failed to load config: {e}[/red]")
            raise typer.Exit(1)

    plan = _load_model(plan_path, WorkoutPlan, "plan")
    plan_blueprint = _load_model(blueprint_path, WorkoutBlueprint, "blueprint")
    previous = [_load_model(path, WorkoutPlan, "history plan") for path in history or []]

    quality_gate = WorkoutPlanQualityGate(gate_config)
    result = quality_gate.process(plan, plan_blueprint, previous)

    if as_json:
        _echo_json(result)
    else:
        _display_gate_result(quality_gate, result)

    if not result.succeeded:
        raise typer.Exit(GATE_REJECTED_EXIT_CODE)


if __name__ == "__main__":
    app()
