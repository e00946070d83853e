"""Coverage rules CLI commands for SEHI Calc."""

import json

import click
from pydantic import ValidationError

from sehicalc.sdk import (
    get_available_years,
    get_coverage_year,
    load_coverage_rules,
    load_rules_file,
)


@click.group()
def rules():
    """Inspect coverage rules (poverty guidelines, subsidy cliff, tiers)."""
    pass


@rules.command("years")
def rules_years():
    """List coverage years with installed rules."""
    for year in get_available_years():
        click.echo(year)


@rules.command("show")
@click.option("--year", type=int, help="Coverage year (default: settings or newest)")
@click.option("--rules", "rules_file", type=click.Path(exists=True), help="Custom coverage rules YAML file")
@click.option("--household-size", type=click.IntRange(min=1), default=None, help="Also show poverty level and cliff for this size")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def rules_show(year, rules_file, household_size, output_format):
    """Show the coverage rules table in effect."""
    try:
        if rules_file:
            table = load_rules_file(rules_file)
        else:
            table = load_coverage_rules(year or get_coverage_year())
    except (FileNotFoundError, ValueError, ValidationError) as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(table.model_dump(), indent=2))
        return

    guidelines = table.poverty_guidelines
    click.echo(f"Coverage year: {table.year}")
    click.echo(f"Poverty level (1 person): ${guidelines.base:,.0f}")
    click.echo(f"Per additional person:    ${guidelines.per_additional_person:,.0f}")
    click.echo(f"Subsidy cliff:            {table.subsidy_cliff_percent:g}% FPL")
    click.echo(f"Capital loss limit:       ${table.capital_loss_limit:,.0f}")
    click.echo("Usage tiers:")
    for tier in table.usage_tiers:
        click.echo(f"  {tier.label:<8} ${tier.billed_amount:,.0f}")

    if household_size is not None:
        poverty = guidelines.for_household(household_size)
        cliff = poverty * table.subsidy_cliff_percent / 100
        click.echo()
        click.echo(f"Household of {household_size}: poverty level ${poverty:,.0f}, "
                   f"cliff MAGI ${cliff:,.0f}")
