"""SEHI Calc CLI - Compare S-Corp SEHI vs. ACA subsidy premium strategies."""

import json
import logging
import os

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from sehicalc import __version__
from sehicalc.sdk import (
    ProfileNotFoundError,
    apply_overrides,
    compare_strategies,
    default_inputs,
    get_advisor_timeout,
    get_analysis,
    get_coverage_year,
    get_profile_path,
    get_setting,
    load_coverage_rules,
    load_household,
    load_inputs_file,
    load_rules_file,
    parse_override,
)

from .profile_commands import profile as profile_group
from .rules_commands import rules as rules_group
from .settings_commands import settings as settings_group
from .renderers.comparison_renderer import render_advisory, render_comparison


def _configure_logging(verbose: bool) -> None:
    """Configure logging from LOG_LEVEL (default WARNING, DEBUG with -v)."""
    level_name = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S"
    )


@click.group()
@click.version_option(version=__version__, prog_name="sehi-calc")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose):
    """SEHI Calc - S-Corp health insurance strategy comparison.

    Compares, for a >2% S-Corp shareholder, adding the health premium to
    W-2 wages and taking the SEHI deduction (Scenario 1) against paying
    the premium personally and claiming the ACA premium tax credit
    (Scenario 2).

    Household inputs are loaded from (in order):

    \b
    1. --inputs FILE (YAML or JSON)
    2. The profile's household (see 'sehi-calc profile show')
    3. The built-in sample household
    """
    _configure_logging(verbose)


cli.add_command(profile_group)
cli.add_command(settings_group)
cli.add_command(rules_group)


def input_options(func):
    """Shared options selecting the household and coverage rules."""
    options = [
        click.option("--inputs", "inputs_file", type=click.Path(exists=True),
                     help="Household inputs file (YAML or JSON)"),
        click.option("--example", is_flag=True, help="Use the built-in sample household"),
        click.option("--set", "overrides", multiple=True, metavar="KEY=VALUE",
                     help="Override an input, e.g. --set annual_premium=18000 "
                          "or --set spouse.gross_pay=50000 (repeatable)"),
        click.option("--year", type=int, help="Coverage rules year (default: settings or newest)"),
        click.option("--rules", "rules_file", type=click.Path(exists=True),
                     help="Custom coverage rules YAML file"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_inputs(inputs_file, example, overrides):
    """Load household inputs per the documented precedence and apply overrides."""
    try:
        if example:
            inputs = default_inputs()
        elif inputs_file:
            inputs = load_inputs_file(inputs_file)
        elif get_profile_path(require_exists=False).exists():
            inputs = load_household()
        else:
            click.echo("No household profile found; using the sample household. "
                       "Create one with 'sehi-calc profile init'.", err=True)
            inputs = default_inputs()

        if overrides:
            inputs = apply_overrides(inputs, dict(parse_override(o) for o in overrides))
    except (FileNotFoundError, ProfileNotFoundError) as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(f"Invalid household inputs:\n{e}")
    except (ValueError, KeyError) as e:
        raise click.ClickException(str(e.args[0]) if e.args else str(e))
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML: {e}")

    return inputs


def _resolve_rules(year, rules_file):
    try:
        if rules_file:
            return load_rules_file(rules_file)
        return load_coverage_rules(year or get_coverage_year())
    except (FileNotFoundError, ValueError, ValidationError) as e:
        raise click.ClickException(str(e))


def _output_format(output_format):
    return output_format or get_setting("default_output_format") or "text"


@cli.command("compare")
@input_options
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default=None,
              help="Output format (default: settings or text)")
def compare(inputs_file, example, overrides, year, rules_file, output_format):
    """Compare net premium cost under both strategies.

    Shows both scenarios, the winner, a cost chart, a line-item breakdown
    and total cost for low / medium / high medical usage.

    Examples:
      sehi-calc compare --example
      sehi-calc compare --inputs household.yaml --format json
      sehi-calc compare --set household_size=4 --set estimated_subsidy=9500
    """
    inputs = _resolve_inputs(inputs_file, example, overrides)
    coverage_rules = _resolve_rules(year, rules_file)
    result = compare_strategies(inputs, coverage_rules)

    if _output_format(output_format) == "json":
        click.echo(json.dumps({
            "inputs": inputs.model_dump(),
            "result": result.model_dump(),
        }, indent=2))
        return

    render_comparison(Console(), inputs, result)


@cli.command("advise")
@input_options
@click.option("--timeout", type=int, default=None, help="Seconds to wait for the advisor (default: settings)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default=None,
              help="Output format (default: settings or text)")
def advise(inputs_file, example, overrides, year, rules_file, timeout, output_format):
    """Get an AI strategic analysis of the comparison.

    Requires the Gemini CLI. When it is unavailable a placeholder message
    is shown; the comparison itself is unaffected.
    """
    inputs = _resolve_inputs(inputs_file, example, overrides)
    coverage_rules = _resolve_rules(year, rules_file)
    result = compare_strategies(inputs, coverage_rules)

    try:
        timeout = timeout or get_advisor_timeout()
    except ValueError as e:
        raise click.ClickException(str(e))

    advisory = get_analysis(inputs, result, coverage_rules, timeout=timeout)

    if _output_format(output_format) == "json":
        click.echo(json.dumps({
            "result": result.model_dump(),
            "advisory": advisory.model_dump(),
        }, indent=2))
        return

    console = Console()
    render_comparison(console, inputs, result)
    render_advisory(console, advisory)


@cli.command("example")
@click.option("--format", "output_format", type=click.Choice(["yaml", "json"]), default="yaml",
              help="Output format (default: yaml)")
def example(output_format):
    """Print the sample household as an inputs file.

    Example:
      sehi-calc example > household.yaml
    """
    data = default_inputs().model_dump()
    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False), nl=False)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
