"""Configuration management for SEHI Calc.

Configuration is split into two files:

1. settings.json - Machine-specific preferences
   - coverage_year: which coverage-rules table to use by default
   - default_output_format: text or json
   - advisor_timeout: seconds to wait for the advisory narrative
   - profile: path to profile.yaml (optional, if not colocated)

2. profile.yaml - The household being analyzed
   - household: pay stubs, other income, premium, plan design

Config directory resolution:
1. SEHI_CALC_CONFIG_PATH environment variable (if set)
2. ~/.config/sehi-calc/ (XDG_CONFIG_HOME fallback)
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .inputs import inputs_from_dict
from .rules import DEFAULT_COVERAGE_YEAR
from .schemas import FinancialInputs


APP_NAME = "sehi-calc"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"

DEFAULT_ADVISOR_TIMEOUT = 60
KNOWN_SETTINGS = ("coverage_year", "default_output_format", "advisor_timeout", "profile")


class ProfileNotFoundError(Exception):
    """Raised when no household profile is found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. SEHI_CALC_CONFIG_PATH environment variable
    2. ~/.config/sehi-calc/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("SEHI_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json."""
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def unset_setting(key: str) -> bool:
    """Remove a setting. Returns True if it was present."""
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_coverage_year() -> int:
    """Coverage year from settings, or DEFAULT_COVERAGE_YEAR."""
    value = get_setting("coverage_year")
    if value is None:
        return DEFAULT_COVERAGE_YEAR
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid coverage_year setting: {value!r}")


def get_advisor_timeout() -> int:
    """Advisory narrative timeout in seconds."""
    value = get_setting("advisor_timeout", DEFAULT_ADVISOR_TIMEOUT)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid advisor_timeout setting: {value!r}")


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to the profile.yaml file.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    custom_profile = load_settings().get("profile")
    if custom_profile:
        profile_path = Path(custom_profile).expanduser()
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}\n\n"
                f"Update with: sehi-calc settings set profile /path/to/profile.yaml"
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found at {profile_path}\n\n"
            f"Create one with: sehi-calc profile init"
        )
    return profile_path


def load_profile(require_exists: bool = True) -> dict:
    """Load the household profile from profile.yaml.

    Returns:
        Profile dictionary (empty dict if not required and not found)

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
        ValueError: If the profile is not a YAML mapping
    """
    profile_path = get_profile_path(require_exists=require_exists)

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        profile = yaml.safe_load(f) or {}

    if not isinstance(profile, dict):
        raise ValueError(f"Profile must contain a mapping, got {type(profile).__name__}: {profile_path}")
    return profile


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save the household profile to profile.yaml."""
    if path is None:
        path = get_profile_path(require_exists=False)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)

    return path


def load_household(require_exists: bool = True) -> FinancialInputs:
    """Load the profile's household as sanitized FinancialInputs.

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    profile = load_profile(require_exists=require_exists)
    return inputs_from_dict(profile.get("household") or {})


def save_household(inputs: FinancialInputs) -> Path:
    """Write FinancialInputs into the profile's household section."""
    profile = load_profile(require_exists=False)
    profile["household"] = inputs.model_dump()
    return save_profile(profile)
