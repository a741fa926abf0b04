"""Session preview command: sessions."""

from datetime import date
from typing import Annotated

import typer

from ...core.config import DURATION_ONBOARDING, FREQUENCY_DEFAULT, VOLUME_START
from ...core.models import IntensityTier, ProgramConfig, SessionStyle, StrengthTemplate
from ...core.session_generator import generate_sessions
from ...core.simulation import DEFAULT_START_DATE, DEFAULT_USER_ID
from ...io.serializers import ValidationError, session_to_dict, to_json, validate_date
from .. import views
from ..app import EquipmentOption, StyleOption, TemplateOption, app, build_options


@app.command()
def sessions(
    per_week: Annotated[
        int,
        typer.Option("--per-week", "-n", help="Sessions per week (2-4)"),
    ] = FREQUENCY_DEFAULT,
    intensity: Annotated[
        IntensityTier,
        typer.Option("--intensity", "-i", help="Intensity tier"),
    ] = IntensityTier.LIGHT,
    duration: Annotated[
        int,
        typer.Option("--duration", "-d", help="Session duration in minutes (15-60)"),
    ] = DURATION_ONBOARDING,
    volume: Annotated[
        float,
        typer.Option("--volume", help="Volume multiplier, e.g. 1.2"),
    ] = VOLUME_START,
    week: Annotated[
        int,
        typer.Option("--week", "-w", help="Absolute training week (seeds selection)"),
    ] = 1,
    start: Annotated[
        str,
        typer.Option("--start", help="Week start date (YYYY-MM-DD)"),
    ] = DEFAULT_START_DATE.isoformat(),
    user_id: Annotated[
        str,
        typer.Option("--user", "-u", help="Athlete id used to seed exercise selection"),
    ] = DEFAULT_USER_ID,
    minimum_viable: Annotated[
        bool,
        typer.Option("--minimum-viable", "-m", help="Show the minimum-viable variant"),
    ] = False,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    template: TemplateOption = StrengthTemplate.FULL_BODY,
    style: StyleOption = SessionStyle.BALANCED,
    equipment: EquipmentOption = None,
) -> None:
    """
    Preview one week of sessions for a given program.
    """
    try:
        week_start = date.fromisoformat(validate_date(start))
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if week < 1:
        views.print_error("--week must be >= 1")
        raise typer.Exit(1)

    try:
        program = ProgramConfig(per_week, intensity, duration, volume)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    generated = generate_sessions(
        program,
        user_id,
        week,
        week_start,
        is_minimum_viable=minimum_viable,
        options=build_options(template, style, equipment),
    )

    if json_out:
        print(to_json({"program": program.summary(), "sessions": [session_to_dict(s) for s in generated]}))
        return

    views.print_info(f"Program: {program.summary()}")
    views.print_sessions(generated)
