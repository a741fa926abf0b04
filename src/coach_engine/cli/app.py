"""Shared Typer app object, shared option types, and option helpers."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import EngineSettings
from ..core.engine.config_loader import load_engine_settings
from ..core.logger import setup_logger
from ..core.models import SessionStyle, StrengthTemplate
from ..core.session_generator import GenerationOptions

# Shared generation options used across commands
TemplateOption = Annotated[
    StrengthTemplate,
    typer.Option("--template", "-t", help="Strength template"),
]
StyleOption = Annotated[
    SessionStyle,
    typer.Option("--style", "-s", help="Session style"),
]
EquipmentOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--equipment",
        "-q",
        help="Allowed equipment (repeatable), e.g. -q bodyweight -q pull_up_bar",
    ),
]
SettingsOption = Annotated[
    Optional[Path],
    typer.Option("--settings", help="YAML file overriding evaluator thresholds"),
]

app = typer.Typer(
    name="coach-engine",
    help="Adaptive weekly training coach: simulate scenarios and preview sessions.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine decision logs"),
    ] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write engine logs to this file"),
    ] = None,
) -> None:
    """
    Adaptive weekly training coach.
    """
    if verbose or log_file is not None:
        setup_logger("DEBUG" if verbose else "INFO", log_file=log_file)


def build_options(
    template: StrengthTemplate,
    style: SessionStyle,
    equipment: list[str] | None,
) -> GenerationOptions:
    """Generation options from CLI flags."""
    return GenerationOptions(
        strength_template=template,
        session_style=style,
        equipment_filter=tuple(equipment or ()),
    )


def get_settings(path: Path | None) -> EngineSettings:
    """
    Evaluator settings: bundled engine.yaml, user override, then --settings.

    Raises:
        ValueError: On unknown keys or invalid threshold values
        FileNotFoundError: If --settings points at a missing file
    """
    return load_engine_settings(path)
