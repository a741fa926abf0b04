"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of simulation runs and sessions.
"""

from rich.console import Console
from rich.table import Table

from ..core.models import CoachTone, Session, TrainingDecision
from ..core.output import SimulationOutput, WeeklyEngineOutput
from ..core.simulation import SimulationScenario

console = Console()

DECISION_STYLES: dict[TrainingDecision, str] = {
    TrainingDecision.PROGRESS: "green",
    TrainingDecision.MAINTAIN: "yellow",
    TrainingDecision.SCALE_BACK: "red",
}

TONE_ICONS: dict[CoachTone, str] = {
    CoachTone.CELEBRATORY: "*",
    CoachTone.ENCOURAGING: "+",
    CoachTone.STEADY: "=",
    CoachTone.GENTLE: "~",
}


def format_scenarios_table(scenarios: list[SimulationScenario]) -> Table:
    """
    Format bundled scenarios as a Rich table.

    Args:
        scenarios: Scenarios to list

    Returns:
        Rich Table object
    """
    table = Table(title="Scenarios")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Weeks", justify="right")
    table.add_column("Description")
    for scenario in scenarios:
        table.add_row(scenario.name, str(len(scenario.weeks)), scenario.description)
    return table


def format_week_table(weeks: tuple[WeeklyEngineOutput, ...], title: str) -> Table:
    """
    Format one row per simulated week.

    Args:
        weeks: Weekly outputs in order
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(title=title, show_lines=False)

    table.add_column("Wk", justify="right", style="dim", width=3)
    table.add_column("Phase", style="magenta")
    table.add_column("Done", justify="right")
    table.add_column("Fatigue", justify="right")
    table.add_column("Energy")
    table.add_column("Adh.", justify="right")
    table.add_column("Decision")
    table.add_column("Program")
    table.add_column("Change", style="dim")

    for week in weeks:
        decision_style = DECISION_STYLES[week.decision.type]
        target = week.program.sessions_per_week
        done = f"{week.completion.raw_sessions_completed}/{target}"
        change = week.program_change.description if week.program_change.occurred else ""
        table.add_row(
            str(week.week_number),
            f"{week.phase.value} {week.phase_week}",
            done,
            f"{week.state.fatigue_score:.1f}",
            week.state.energy_context.value,
            f"{week.state.adherence_rate_2week:.0%}",
            f"[{decision_style}]{week.decision.type.value}[/{decision_style}]",
            week.program.summary(),
            change or "",
        )

    return table


def print_key_messages(weeks: tuple[WeeklyEngineOutput, ...]) -> None:
    """Print the coaching message of every week that changed the program."""
    console.print()
    console.print("[bold]Key coaching messages[/bold]")
    shown = 0
    for week in weeks:
        if week.decision.type == TrainingDecision.MAINTAIN and not week.program_change.occurred:
            continue
        icon = TONE_ICONS[week.decision.coach_tone]
        console.print(f"  {icon} Week {week.week_number}: {week.decision.coaching_message}")
        console.print(f"    [dim]{week.decision.reason}[/dim]")
        shown += 1
    if shown == 0:
        console.print("  [dim]Steady throughout: no progressions or scale-backs.[/dim]")


def format_final_state(simulation: SimulationOutput) -> str:
    """
    Format the end-of-run summary as a text block.

    Args:
        simulation: Completed simulation

    Returns:
        Formatted string
    """
    final = simulation.final_state
    meta = simulation.simulation_metadata
    breakdown = ", ".join(f"{d.value} {n}" for d, n in meta.decisions_breakdown.items())
    lines = [
        "Final state",
        f"- Phase: {final.phase.value} (week {final.phase_week})",
        f"- Program: {final.current_program.summary()}",
        f"- Sessions: {final.total_sessions_planned} planned / {final.total_sessions_raw} total",
        f"- Decisions: {breakdown}",
    ]
    if meta.phase_transitions:
        transitions = ", ".join(
            f"wk{t.week} {t.from_phase.value}->{t.to_phase.value}" for t in meta.phase_transitions
        )
        lines.append(f"- Transitions: {transitions}")
    if final.weeks_since_scale_back is not None:
        lines.append(f"- Weeks since scale-back: {final.weeks_since_scale_back}")
    return "\n".join(lines)


def print_simulation(simulation: SimulationOutput) -> None:
    """
    Print a full simulation report to console.

    Args:
        simulation: Completed simulation
    """
    console.print(format_week_table(simulation.weeks, simulation.scenario_name))
    print_key_messages(simulation.weeks)
    console.print()
    console.print(format_final_state(simulation))


def format_session_table(session: Session) -> Table:
    """Exercises of one session as a Rich table."""
    label = "minimum viable" if session.is_minimum_viable else session.intensity_tier.value
    table = Table(
        title=f"Session {session.session_type.value} - {session.date} "
        f"({session.target_duration_minutes}min, {label})"
    )
    table.add_column("Exercise", style="cyan")
    table.add_column("Cat.", style="magenta")
    table.add_column("Sets", justify="right")
    table.add_column("Reps")
    table.add_column("Rest(s)", justify="right")
    table.add_column("Notes", style="dim")

    for exercise in session.exercises:
        name = exercise.name + (" [yellow](fallback)[/yellow]" if exercise.selection_fallback else "")
        table.add_row(
            name,
            exercise.category.value,
            str(exercise.sets),
            exercise.reps,
            "" if exercise.rest_seconds is None else str(exercise.rest_seconds),
            exercise.notes or "",
        )
    return table


def print_sessions(sessions: list[Session]) -> None:
    """Print each session as its own table."""
    if not sessions:
        console.print("[yellow]No sessions generated.[/yellow]")
        return
    for session in sessions:
        console.print(format_session_table(session))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
