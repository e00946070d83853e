"""Settings CLI commands for SEHI Calc.

Manages settings.json - coverage year, output format, advisor timeout.
"""

import click

from sehicalc.sdk import (
    DEFAULT_COVERAGE_YEAR,
    KNOWN_SETTINGS,
    get_advisor_timeout,
    get_coverage_year,
    get_settings_path,
    load_settings,
    set_setting,
    unset_setting,
)

INT_SETTINGS = ("coverage_year", "advisor_timeout")


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - coverage_year: coverage-rules table to use (default: newest)
    - default_output_format: text or json
    - advisor_timeout: seconds to wait for the AI advisor
    - profile: path to profile.yaml (set via 'profile use')
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their effective values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if current:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")
    else:
        click.echo("No settings configured (using defaults).")

    click.echo()
    click.echo("Effective values:")
    try:
        click.echo(f"  coverage_year: {get_coverage_year()}"
                   + (" (default)" if "coverage_year" not in current else ""))
        click.echo(f"  advisor_timeout: {get_advisor_timeout()}s")
    except ValueError as e:
        raise click.ClickException(str(e))


@settings.command("set")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
@click.argument("value")
def settings_set(key, value):
    """Set a setting value.

    Examples:
        sehi-calc settings set coverage_year 2026
        sehi-calc settings set default_output_format json
    """
    parsed_value = value
    if key in INT_SETTINGS:
        try:
            parsed_value = int(value)
        except ValueError:
            raise click.BadParameter(f"{key} must be an integer, got '{value}'")
        if parsed_value <= 0:
            raise click.BadParameter(f"{key} must be positive, got {parsed_value}")
    elif key == "default_output_format" and value not in ("text", "json"):
        raise click.BadParameter(f"default_output_format must be 'text' or 'json', got '{value}'")

    settings_file = set_setting(key, parsed_value)
    click.echo(f"Set {key}: {parsed_value}")
    click.echo(f"Saved to: {settings_file}")


@settings.command("unset")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
def settings_unset(key):
    """Clear a setting, reverting to its default."""
    if unset_setting(key):
        click.echo(f"Cleared {key} setting.")
        if key == "coverage_year":
            click.echo(f"Coverage year is now: {DEFAULT_COVERAGE_YEAR} (default)")
    else:
        click.echo(f"{key} was not set.")
