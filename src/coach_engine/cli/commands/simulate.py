"""Scenario commands: scenarios, simulate."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.invariants import EngineError
from ...core.models import SessionStyle, StrengthTemplate
from ...core.simulation import DEFAULT_USER_ID, run_simulation
from ...io.scenarios import get_scenario, load_scenarios
from ...io.serializers import ValidationError, simulation_to_dict, to_json
from .. import views
from ..app import (
    EquipmentOption,
    SettingsOption,
    StyleOption,
    TemplateOption,
    app,
    build_options,
    get_settings,
)

ScenarioFileOption = Annotated[
    Optional[Path],
    typer.Option("--scenario-file", "-f", help="YAML scenario library (default: bundled)"),
]


@app.command()
def scenarios(scenario_file: ScenarioFileOption = None) -> None:
    """
    List available simulation scenarios.
    """
    try:
        library = load_scenarios(scenario_file)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.console.print(views.format_scenarios_table(library))


@app.command()
def simulate(
    name: Annotated[str, typer.Argument(help="Scenario name (see `coach-engine scenarios`)")],
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the JSON result to this file"),
    ] = None,
    user_id: Annotated[
        str,
        typer.Option("--user", "-u", help="Athlete id used to seed exercise selection"),
    ] = DEFAULT_USER_ID,
    template: TemplateOption = StrengthTemplate.FULL_BODY,
    style: StyleOption = SessionStyle.BALANCED,
    equipment: EquipmentOption = None,
    settings_path: SettingsOption = None,
    scenario_file: ScenarioFileOption = None,
) -> None:
    """
    Run a scenario week by week and show each decision.
    """
    try:
        scenario = get_scenario(name, scenario_file)
    except KeyError:
        views.print_error(f"Unknown scenario: {name}")
        views.print_info("Run `coach-engine scenarios` to list available scenarios.")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        settings = get_settings(settings_path)
    except (FileNotFoundError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        result = run_simulation(
            scenario,
            user_id=user_id,
            options=build_options(template, style, equipment),
            settings=settings,
        )
    except EngineError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if output is not None:
        output.write_text(to_json(simulation_to_dict(result)) + "\n", encoding="utf-8")
        if not json_out:
            views.print_success(f"Wrote {output}")

    if json_out:
        print(to_json(simulation_to_dict(result)))
        return

    views.print_simulation(result)
