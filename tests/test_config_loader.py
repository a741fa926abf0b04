"""
Settings loader tests.

HOME is pointed at a temporary directory so a real user override file
never leaks into the results.
"""

from pathlib import Path

import pytest

from coach_engine.core.config import DEFAULT_SETTINGS, EngineSettings
from coach_engine.core.engine.config_loader import (
    get_bundled_yaml_path,
    get_user_yaml_path,
    load_engine_config,
    load_engine_settings,
    settings_from_dict,
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def _write_user_file(home: Path, text: str) -> Path:
    path = home / ".coach-engine" / "engine.yaml"
    path.parent.mkdir()
    path.write_text(text)
    return path


class TestBundledDefaults:
    """The bundled engine.yaml mirrors EngineSettings defaults."""

    def test_bundled_file_found(self):
        path = get_bundled_yaml_path()
        assert path is not None
        assert path.name == "engine.yaml"

    def test_bundled_matches_dataclass_defaults(self):
        assert load_engine_settings() == DEFAULT_SETTINGS

    def test_no_user_file(self):
        assert get_user_yaml_path() is None


class TestOverrides:
    """User and explicit files override the bundled values."""

    def test_user_file_overrides(self, isolated_home: Path):
        _write_user_file(isolated_home, "evaluator:\n  fatigue_scale_back: 8.0\n")
        settings = load_engine_settings()
        assert settings.fatigue_scale_back == 8.0
        assert settings.fatigue_maintain == DEFAULT_SETTINGS.fatigue_maintain

    def test_explicit_file_wins_over_user(self, isolated_home: Path, tmp_path: Path):
        _write_user_file(isolated_home, "evaluator:\n  required_stable_weeks: 3\n")
        explicit = tmp_path / "strict.yaml"
        explicit.write_text("evaluator:\n  required_stable_weeks: 4\n  inactivity_scale_back_days: 18\n")
        settings = load_engine_settings(explicit)
        assert settings.required_stable_weeks == 4
        assert settings.inactivity_scale_back_days == 18

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_engine_settings(tmp_path / "missing.yaml")

    def test_unparseable_user_file_warns(self, isolated_home: Path):
        _write_user_file(isolated_home, "evaluator: [1, 2\n")
        with pytest.warns(UserWarning, match="ignoring settings file"):
            config = load_engine_config()
        assert config["evaluator"]["fatigue_scale_back"] == 7.0

    def test_non_mapping_user_file_warns(self, isolated_home: Path):
        _write_user_file(isolated_home, "- just\n- a list\n")
        with pytest.warns(UserWarning, match="not a mapping"):
            load_engine_config()


class TestSettingsFromDict:
    """Validation of the evaluator section."""

    def test_empty_config_gives_defaults(self):
        assert settings_from_dict({}) == EngineSettings()

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown engine settings"):
            settings_from_dict({"evaluator": {"fatigue_limit": 6}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            settings_from_dict({"evaluator": [1, 2]})

    def test_threshold_ordering_enforced(self):
        with pytest.raises(ValueError, match="fatigue thresholds"):
            settings_from_dict({"evaluator": {"fatigue_maintain": 8.0, "fatigue_scale_back": 6.0}})

    def test_pain_threshold_cannot_exceed_retained_reports(self):
        with pytest.raises(ValueError, match="pain_reports_scale_back must be at most 2"):
            settings_from_dict({"evaluator": {"pain_reports_scale_back": 3}})
        with pytest.raises(ValueError, match="pain_reports_scale_back"):
            EngineSettings(pain_reports_scale_back=3)

    @pytest.mark.parametrize(
        "key, value",
        [("fatigue_maintain", "high"), ("required_stable_weeks", 2.5), ("onboarding_weeks", True)],
    )
    def test_wrong_value_type(self, key, value):
        with pytest.raises(ValueError, match=f"Engine setting '{key}'"):
            settings_from_dict({"evaluator": {key: value}})

    def test_numeric_values_are_coerced(self):
        settings = settings_from_dict(
            {"evaluator": {"fatigue_scale_back": 8, "required_stable_weeks": 3.0}}
        )
        assert settings.fatigue_scale_back == 8.0
        assert isinstance(settings.required_stable_weeks, int)
        assert settings.inactivity_scale_back_days is None
