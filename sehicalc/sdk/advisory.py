"""Advisory narrative for a strategy comparison.

Renders the household inputs and comparison result into a prompt, asks
Gemini for a short strategic analysis, and returns the narrative with any
cited sources. The comparison itself never depends on this: when the
Gemini CLI is missing or fails, a fixed placeholder is returned instead of
raising.
"""

import logging
from typing import Optional

from .. import gemini_client
from .compare import cliff_gap
from .rules import load_coverage_rules
from .schemas import (
    AdvisoryResult,
    Citation,
    CoverageRules,
    FinancialInputs,
    ScenarioResult,
)

logger = logging.getLogger(__name__)

MISSING_CLIENT_MESSAGE = (
    "Gemini CLI is not available. Install and authenticate the 'gemini' "
    "command to enable the advisory analysis."
)
UNAVAILABLE_MESSAGE = "An error occurred while contacting the financial advisor AI."
EMPTY_RESPONSE_MESSAGE = "Unable to generate analysis."

DEFAULT_TIMEOUT = 60


def _money(amount: float) -> str:
    return f"{amount:.2f}"


def build_prompt(
    inputs: FinancialInputs,
    result: ScenarioResult,
    rules: Optional[CoverageRules] = None,
) -> str:
    """Build the advisory prompt. Monetary figures are plain decimals."""
    if rules is None:
        rules = load_coverage_rules(result.coverage_year)

    s1 = result.scenario1
    s2 = result.scenario2
    high = result.usage_scenarios.high
    cliff = rules.subsidy_cliff_percent
    add_backs = inputs.tax_exempt_interest + inputs.non_taxable_social_security

    if s2.hit_cliff:
        gap = _money(cliff_gap(result))
        cliff_line = f"YES (subsidy lost). MAGI exceeds the cliff by about {gap}"
        cliff_task = (
            f"4. CRITICAL: The household hit the subsidy cliff. You MUST explicitly "
            f"recommend reducing MAGI by at least {gap} (e.g., via increased 401k or "
            f"HSA contributions) to get below {cliff:.0f}% FPL and reclaim the "
            f"{_money(inputs.estimated_subsidy)} subsidy."
        )
    else:
        cliff_line = "NO"
        cliff_task = (
            f"4. Mention keeping an eye on MAGI limits if close to the {cliff:.0f}% FPL cliff."
        )

    if result.winner == "Equal":
        winner_line = "Both strategies have the same net premium cost."
    else:
        winner_line = (
            f"{result.winner} saves approximately {_money(result.savings)} per year on premiums."
        )

    return f"""You are an expert tax accountant and financial planner specialized in US tax law for S-Corporation owners.

Analyze the following comparison between two health insurance funding strategies for a 2% S-Corp shareholder.

Detailed Financial Inputs:
- Household Size: {inputs.household_size}
- S-Corp Owner Gross Pay: {_money(inputs.s_corp_owner.gross_pay)}
- Spouse Gross Pay: {_money(inputs.spouse.gross_pay)}
- Other Taxable Income: {_money(inputs.other_income)}
- Health Insurance Premium: {_money(inputs.annual_premium)}
- Plan Deductible: {_money(inputs.plan_deductible)} | OOP Max: {_money(inputs.plan_oop_max)} | Coinsurance: {inputs.plan_coinsurance:g}%
- Marginal Tax Bracket: {inputs.marginal_tax_rate:g}%
- Available Capital Losses: {_money(inputs.capital_losses)} (max {_money(rules.capital_loss_limit)} used against ordinary income)
- Tax-Exempt Interest + Non-Taxable Social Security (MAGI add-backs): {_money(add_backs)}
- Estimated ACA Subsidy (if eligible): {_money(inputs.estimated_subsidy)}

Calculated Results:
- Scenario 1 (S-Corp Deduction Path) Net Premium Cost: {_money(s1.net_cost)}
  - Tax Savings (via SEHI): {_money(s1.tax_savings)}
- Scenario 2 (ACA Subsidies Path) Net Premium Cost: {_money(s2.net_cost)}
  - MAGI for ACA: {_money(s2.magi)}
  - FPL Percentage: {s2.fpl_percentage:.1f}%
  - Hit {cliff:.0f}% Cliff: {cliff_line}

Total Liability (Premium + Est. Medical OOP):
- {high.label} Usage ({_money(high.billed_amount)} billed): Scenario 1 Total = {_money(high.total_cost_scen1)} vs Scenario 2 Total = {_money(high.total_cost_scen2)}

Winner: {winner_line}

Task:
Provide a concise (max 200 words) strategic analysis.
1. Confirm the winning strategy based on Net Premium Cost.
2. Discuss risk: does the premium savings in the winning scenario justify the plan's deductible/OOP exposure?
3. Discuss the impact of pre-tax deductions (401k/HSA) on the ACA MAGI.
{cliff_task}

Reply with ONLY a JSON object of the form:
{{"analysis": "<your analysis>", "citations": [{{"title": "<source title>", "source": "<URL or publication>"}}]}}
Cite IRS or healthcare.gov sources where relevant; use an empty list if none.
"""


def parse_response(response: str) -> AdvisoryResult:
    """Turn a Gemini reply into an AdvisoryResult.

    A reply that is not the requested JSON is surfaced verbatim with no
    citations.
    """
    if not response.strip():
        return AdvisoryResult(text=EMPTY_RESPONSE_MESSAGE, available=False)

    try:
        data = gemini_client.extract_json(response)
    except ValueError:
        logger.debug("Advisory reply was not JSON, using raw text")
        return AdvisoryResult(text=response.strip())

    text = str(data.get("analysis") or "").strip()
    if not text:
        return AdvisoryResult(text=response.strip())

    citations = []
    for item in data.get("citations") or []:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        source = item.get("source") or item.get("uri") or item.get("url")
        if title and source:
            citations.append(Citation(title=str(title), source=str(source)))

    return AdvisoryResult(text=text, citations=citations)


def get_analysis(
    inputs: FinancialInputs,
    result: ScenarioResult,
    rules: Optional[CoverageRules] = None,
    timeout: Optional[int] = None,
) -> AdvisoryResult:
    """Ask Gemini for a strategic analysis of the comparison.

    Never raises for collaborator problems: a missing CLI or a failed /
    timed-out call returns a placeholder with available=False.
    """
    if not gemini_client.is_available():
        logger.warning("Gemini CLI not found on PATH; skipping advisory analysis")
        return AdvisoryResult(text=MISSING_CLIENT_MESSAGE, available=False)

    prompt = build_prompt(inputs, result, rules)

    try:
        response = gemini_client.process_prompt(prompt, timeout=timeout or DEFAULT_TIMEOUT)
    except RuntimeError as e:
        logger.error(f"Gemini advisory call failed: {e}")
        return AdvisoryResult(text=UNAVAILABLE_MESSAGE, available=False)

    return parse_response(response)
