"""Rich renderer for strategy comparisons.

Transforms SDK results into comparison cards, a bar chart, a line-item
breakdown and the usage-scenario table. All rounding happens here.
"""

from rich import box
from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sehicalc.sdk.compare import cliff_gap
from sehicalc.sdk.schemas import AdvisoryResult, FinancialInputs, ScenarioResult

BAR_WIDTH = 40


def render_comparison(console: Console, inputs: FinancialInputs, result: ScenarioResult) -> None:
    """Render a full comparison.

    Args:
        console: Rich Console instance
        inputs: Household inputs the result was computed from
        result: Output of compare_strategies()
    """
    _render_cards(console, inputs, result)
    _render_banner(console, result)
    _render_chart(console, result)
    _render_breakdown(console, inputs, result)
    render_usage_table(console, result)


def _render_cards(console: Console, inputs: FinancialInputs, result: ScenarioResult) -> None:
    s1 = result.scenario1
    s2 = result.scenario2

    card1 = Table(show_header=False, box=None, padding=(0, 1))
    card1.add_column("item")
    card1.add_column("amount", justify="right")
    card1.add_row("Premium Cost", _fmt(inputs.annual_premium))
    card1.add_row("[green]SEHI Tax Savings[/green]", f"[green]- {_fmt(s1.tax_savings)}[/green]")
    card1.add_row("[bold]Net Premium Cost[/bold]", f"[bold]{_fmt_whole(s1.net_cost)}[/bold]")

    card2 = Table(show_header=False, box=None, padding=(0, 1))
    card2.add_column("item")
    card2.add_column("amount", justify="right")
    card2.add_row("Premium Cost", _fmt(inputs.annual_premium))
    if s2.hit_cliff:
        card2.add_row(
            "[dim strike]ACA Subsidy (PTC)[/dim strike]",
            f"[dim strike]- {_fmt(inputs.estimated_subsidy)}[/dim strike]",
        )
        card2.add_row("[red]Subsidy (cliff hit)[/red]", "[red]$0.00[/red]")
    else:
        card2.add_row("[magenta]ACA Subsidy (PTC)[/magenta]", f"[magenta]- {_fmt(s2.subsidy)}[/magenta]")
    card2.add_row("[bold]Net Premium Cost[/bold]", f"[bold]{_fmt_whole(s2.net_cost)}[/bold]")

    title1 = "Scenario 1: S-Corp Path"
    title2 = "Scenario 2: ACA Path"
    if result.winner == "Scenario 1":
        title1 += " [bold white on blue] WINNER [/bold white on blue]"
    elif result.winner == "Scenario 2":
        title2 += " [bold white on magenta] WINNER [/bold white on magenta]"
    if s2.hit_cliff:
        title2 += " [bold white on red] CLIFF HIT [/bold white on red]"

    console.print(Columns([
        Panel(card1, title=title1, border_style="blue" if result.winner == "Scenario 1" else "dim"),
        Panel(card2, title=title2, border_style="magenta" if result.winner == "Scenario 2" else "dim"),
    ]))


def _render_banner(console: Console, result: ScenarioResult) -> None:
    if result.winner == "Equal":
        headline = "Both options cost the same"
    else:
        headline = f"{result.winner} is the better option"

    lines = [
        f"[bold]{headline}[/bold]",
        f"Potential premium savings: [bold green]{_fmt(result.savings)}[/bold green]",
    ]
    gap = cliff_gap(result)
    if gap is not None:
        lines.append(
            f"[red]Subsidy removed: MAGI is over the cliff. Reduce MAGI by about "
            f"{_fmt_whole(gap)} to reclaim it.[/red]"
        )
    console.print(Panel("\n".join(lines), border_style="green"))


def _render_chart(console: Console, result: ScenarioResult) -> None:
    """Stacked bar per scenario: net cost, then what the tax benefit covered."""
    s1 = result.scenario1
    s2 = result.scenario2
    rows = [
        ("Scenario 1 (S-Corp)", s1.net_cost, s1.tax_savings, "white"),
        ("Scenario 2 (ACA)", s2.net_cost, s2.subsidy, "magenta"),
    ]
    scale = max((net + benefit for _, net, benefit, _ in rows), default=0)
    cheapest = min(s1.net_cost, s2.net_cost)

    table = Table(title="Net Premium Cost Comparison", box=box.SIMPLE, show_header=False)
    table.add_column("scenario", style="bold", min_width=20)
    table.add_column("bar", min_width=BAR_WIDTH)
    table.add_column("net", justify="right")

    for label, net, benefit, benefit_color in rows:
        net_cells = _cells(net, scale)
        benefit_cells = _cells(benefit, scale)
        color = "green" if net == cheapest else "blue"
        bar = f"[{color}]{'█' * net_cells}[/{color}][{benefit_color}]{'░' * benefit_cells}[/{benefit_color}]"
        table.add_row(label, bar, _fmt_whole(net))

    console.print(table)
    console.print(
        "[dim]█ net premium cost (green = lower)  ░ tax savings / ACA subsidy[/dim]"
    )


def _cells(amount: float, scale: float) -> int:
    if scale <= 0 or amount <= 0:
        return 0
    return max(1, round(amount / scale * BAR_WIDTH))


def _render_breakdown(console: Console, inputs: FinancialInputs, result: ScenarioResult) -> None:
    s1 = result.scenario1
    s2 = result.scenario2

    table = Table(title="Line-Item Breakdown", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=28)
    table.add_column("Scenario 1 (SEHI)", justify="right", min_width=16)
    table.add_column("Scenario 2 (ACA)", justify="right", min_width=16)

    table.add_row("Owner W-2 Box 1", _fmt(s1.total_w2), _fmt(s1.total_w2 - inputs.annual_premium))
    table.add_row("Initial AGI", _fmt(s1.initial_agi), _fmt(s2.initial_agi))
    table.add_row("SEHI Deduction", f"- {_fmt(s1.deductible_sehi)}", "-")
    table.add_row("Final AGI", _fmt(s1.final_agi), _fmt(s2.initial_agi))
    table.add_row("MAGI (ACA)", "-", _fmt(s2.magi))
    table.add_row("FPL %", "-", f"{s2.fpl_percentage:.1f}%")
    table.add_row("", "", "")
    table.add_row("Premium", _fmt(inputs.annual_premium), _fmt(inputs.annual_premium))
    table.add_row("Tax Savings", f"- {_fmt(s1.tax_savings)}", "-")
    table.add_row("Subsidy Applied", "-", f"- {_fmt(s2.subsidy)}")
    table.add_row(
        "[bold green]NET PREMIUM COST[/bold green]",
        f"[bold green]{_fmt(s1.net_cost)}[/bold green]",
        f"[bold green]{_fmt(s2.net_cost)}[/bold green]",
    )

    console.print(table)


def render_usage_table(console: Console, result: ScenarioResult) -> None:
    """Render total cost of ownership for each usage tier."""
    table = Table(title="Total Cost by Medical Usage (Premium + OOP)", box=box.ROUNDED)
    table.add_column("Usage", style="bold")
    table.add_column("Billed", justify="right")
    table.add_column("Your OOP", justify="right")
    table.add_column("Scenario 1 Total", justify="right")
    table.add_column("Scenario 2 Total", justify="right")

    for usage in result.usage_scenarios.as_list():
        total1 = _fmt_whole(usage.total_cost_scen1)
        total2 = _fmt_whole(usage.total_cost_scen2)
        if usage.total_cost_scen1 < usage.total_cost_scen2:
            total1 = f"[green]{total1}[/green]"
        elif usage.total_cost_scen2 < usage.total_cost_scen1:
            total2 = f"[green]{total2}[/green]"
        table.add_row(
            usage.label,
            _fmt_whole(usage.billed_amount),
            _fmt_whole(usage.oop_cost),
            total1,
            total2,
        )

    console.print(table)


def render_advisory(console: Console, advisory: AdvisoryResult) -> None:
    """Render the advisory narrative and its citations verbatim."""
    style = "cyan" if advisory.available else "yellow"
    console.print(Panel(Text(advisory.text), title="AI Tax Strategy Advisor", border_style=style))

    if advisory.citations:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("title")
        table.add_column("source", style="dim")
        for citation in advisory.citations:
            table.add_row(Text(citation.title), Text(citation.source))
        console.print(Panel(table, title="Sources", border_style="dim"))


def _fmt(amount: float | None) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"${amount:,.2f}"


def _fmt_whole(amount: float | None) -> str:
    """Format currency amount to whole dollars."""
    if amount is None:
        return "-"
    return f"${amount:,.0f}"
