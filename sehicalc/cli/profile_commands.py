"""Profile CLI commands for SEHI Calc.

Manages the household profile (profile.yaml): pay stubs, other income,
premium and plan design used by 'compare' and 'advise'.
"""

import click
import yaml
from pydantic import ValidationError

from sehicalc.sdk import (
    get_profile_path,
    load_profile,
    load_household,
    save_household,
    save_profile,
    set_setting,
    apply_overrides,
    default_inputs,
    inputs_from_dict,
    ProfileNotFoundError,
)


@click.group()
def profile():
    """Manage the household profile (profile.yaml).

    The profile's 'household' section holds both pay stubs, other income,
    the health premium and plan design. Keys may be snake_case or the
    camelCase used by web exports.
    """
    pass


@profile.command("show")
def profile_show():
    """Show the profile location and the sanitized household inputs."""
    profile_path = get_profile_path(require_exists=False)
    click.echo(f"Profile: {profile_path}")

    if not profile_path.exists():
        click.echo()
        click.echo("Profile does not exist yet. Create one with:")
        click.echo("  sehi-calc profile init")
        return

    try:
        inputs = load_household()
    except (ProfileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {profile_path}: {e}")

    click.echo()
    click.echo(yaml.dump({"household": inputs.model_dump()}, default_flow_style=False, sort_keys=False))


@profile.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing household profile")
def profile_init(force):
    """Create a profile seeded with the sample household.

    Edit the values afterwards with 'sehi-calc profile set'.
    """
    profile_path = get_profile_path(require_exists=False)
    try:
        existing = load_profile(require_exists=False)
    except ValueError as e:
        if not force:
            raise click.ClickException(f"{e}\nUse --force to overwrite.")
        existing = {}

    if existing.get("household") and not force:
        raise click.ClickException(
            f"Profile already has a household: {profile_path}\n"
            f"Use --force to overwrite."
        )

    existing["household"] = default_inputs().model_dump()
    saved = save_profile(existing)
    click.echo(f"Created household profile: {saved}")


@profile.command("set")
@click.argument("key")
@click.argument("value")
def profile_set(key, value):
    """Set one household input.

    KEY is a field name, dotted for pay stub fields.
    VALUE is a number; malformed or negative entries are stored as 0.

    Examples:
        sehi-calc profile set annual_premium 18000
        sehi-calc profile set s_corp_owner.gross_pay 90000
    """
    try:
        current = load_household(require_exists=False)
        updated = apply_overrides(current, {key: value})
    except KeyError as e:
        raise click.ClickException(str(e.args[0]))
    except ValidationError as e:
        raise click.ClickException(f"Invalid value for {key}:\n{e}")
    except ValueError as e:
        raise click.ClickException(str(e))

    profile_file = save_household(updated)
    click.echo(f"Set {key} = {value}")
    click.echo(f"Saved to: {profile_file}")


@profile.command("use")
@click.argument("profile_path", type=click.Path(exists=True))
def profile_use(profile_path):
    """Set the active profile to an external file.

    The household section is validated before switching.
    """
    from pathlib import Path

    path = Path(profile_path).expanduser().resolve()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise click.ClickException(f"Profile must be a YAML dictionary, got {type(data).__name__}")

    try:
        inputs_from_dict(data.get("household") or {})
    except ValidationError as e:
        raise click.ClickException(f"Invalid household in {path}:\n{e}")
    except ValueError as e:
        raise click.ClickException(f"Invalid household in {path}: {e}")

    settings_file = set_setting("profile", str(path))
    click.echo(f"Active profile set to: {path}")
    click.echo(f"Saved to: {settings_file}")
