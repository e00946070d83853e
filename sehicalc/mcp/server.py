"""SEHI Calc MCP Server - FastMCP tools for health premium strategy comparison."""

import json
import logging
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from sehicalc.sdk import (
    compare_strategies,
    cliff_gap,
    default_inputs,
    get_available_years,
    get_coverage_year,
    inputs_from_dict,
    load_coverage_rules,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("sehi-calc")


# --- Tools ---

@mcp.tool()
async def compare_health_strategies(
    household: Optional[dict[str, Any]] = Field(
        default=None,
        description=(
            "Household inputs: s_corp_owner / spouse pay stubs (gross_pay, pre_tax_401k, "
            "hsa_contribution, withholdings), other_income, tax_exempt_interest, "
            "non_taxable_social_security, annual_premium, capital_losses, marginal_tax_rate (%), "
            "estimated_subsidy, household_size, plan_deductible, plan_oop_max, plan_coinsurance (%). "
            "Omit to use the sample household."
        ),
    ),
    year: Optional[int] = Field(default=None, description="Coverage rules year (default: settings or newest)"),
) -> dict[str, Any]:
    """Compare SEHI deduction vs. ACA subsidy net premium cost for a >2% S-Corp shareholder. Returns both scenarios, winner, savings and usage-tier totals."""
    try:
        inputs = default_inputs() if household is None else inputs_from_dict(household)
        rules = load_coverage_rules(year or get_coverage_year())
        result = compare_strategies(inputs, rules)

        return {
            "inputs": inputs.model_dump(),
            "result": result.model_dump(),
            "cliff_gap": cliff_gap(result),
        }

    except Exception as e:
        logger.error(f"Error comparing strategies: {e}")
        return {"error": str(e), "result": None}


@mcp.tool()
async def get_coverage_rules(
    year: Optional[int] = Field(default=None, description="Coverage rules year (default: settings or newest)"),
) -> dict[str, Any]:
    """Get the coverage rules table: poverty guidelines, subsidy cliff percent, capital loss limit and usage tiers."""
    try:
        return {"rules": load_coverage_rules(year or get_coverage_year()).model_dump()}
    except Exception as e:
        logger.error(f"Error loading coverage rules: {e}")
        return {"error": str(e), "rules": None}


# --- Resources (optional, for browsing) ---

@mcp.resource("sehicalc://rules/years")
async def list_years_resource() -> str:
    """List coverage years with installed rules."""
    try:
        return json.dumps({"years": get_available_years()}, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
