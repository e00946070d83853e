"""Input capture boundary.

Household numbers arrive from profile.yaml, JSON/YAML files, CLI
overrides and MCP tool calls. Anything non-numeric, non-finite or negative
is coerced to zero here (and logged) so the comparison engine only ever
sees a valid FinancialInputs.
"""

import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .schemas import FinancialInputs, PayStub

logger = logging.getLogger(__name__)

PAY_STUB_FIELDS = tuple(PayStub.model_fields)
EARNER_FIELDS = ("s_corp_owner", "spouse")
PERCENT_FIELDS = ("marginal_tax_rate", "plan_coinsurance")
AMOUNT_FIELDS = tuple(
    name for name in FinancialInputs.model_fields
    if name not in EARNER_FIELDS + PERCENT_FIELDS + ("household_size",)
)

# Key aliases accepted from older exports and the web form
KEY_ALIASES = {
    "hsa_non_taxable": "hsa_contribution",
    "s_corp_owner_pay": "s_corp_owner",
    "owner": "s_corp_owner",
    "plan_oopmax": "plan_oop_max",
}


def _snake_case(key: str) -> str:
    """Normalize camelCase / kebab-case keys (sCorpOwner, plan-oop-max)."""
    key = key.strip().replace("-", "_")
    key = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key).lower()
    key = key.replace("401_k", "401k")
    key = key.replace("pre_tax401k", "pre_tax_401k")
    return KEY_ALIASES.get(key, key)


def coerce_amount(value: Any, field: str = "value") -> float:
    """Coerce a user-entered amount to a non-negative finite float.

    Strips '$' and ',' from strings. Anything unparseable, non-finite or
    negative becomes 0.
    """
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        logger.warning(f"{field}: boolean {value!r} is not an amount, using 0")
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", "")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        logger.warning(f"{field}: could not parse {value!r}, using 0")
        return 0.0
    if not math.isfinite(amount):
        logger.warning(f"{field}: non-finite value {value!r}, using 0")
        return 0.0
    if amount < 0:
        logger.warning(f"{field}: negative value {amount}, using 0")
        return 0.0
    return amount


def coerce_percent(value: Any, field: str = "value") -> float:
    """Coerce a percentage to the 0-100 range."""
    pct = coerce_amount(value, field)
    if pct > 100:
        logger.warning(f"{field}: {pct} exceeds 100%, using 100")
        return 100.0
    return pct


def coerce_household_size(value: Any) -> int:
    """Coerce household size to an integer of at least 1."""
    size = int(coerce_amount(value, "household_size"))
    if size < 1:
        logger.warning(f"household_size: {size} is below 1, using 1")
        return 1
    return size


def _coerce_pay_stub(data: Any, role: str) -> Dict[str, float]:
    if isinstance(data, PayStub):
        return data.model_dump()
    if not isinstance(data, Mapping):
        if data is not None:
            logger.warning(f"{role}: expected a mapping, got {type(data).__name__}; using zeros")
        return {}

    stub: Dict[str, float] = {}
    for raw_key, raw_value in data.items():
        key = _snake_case(str(raw_key))
        if key not in PAY_STUB_FIELDS:
            logger.warning(f"{role}: ignoring unknown field '{raw_key}'")
            continue
        stub[key] = coerce_amount(raw_value, f"{role}.{key}")
    return stub


def inputs_from_dict(data: Optional[Mapping[str, Any]]) -> FinancialInputs:
    """Build FinancialInputs from a loose mapping.

    Accepts snake_case or camelCase keys. Missing fields default to zero
    (household size to 1). Unknown fields are logged and ignored.

    Raises:
        ValueError: If data is not a mapping
    """
    if data is not None and not isinstance(data, Mapping):
        raise ValueError(f"Household inputs must be a mapping, got {type(data).__name__}")

    fields: Dict[str, Any] = {}

    for raw_key, raw_value in (data or {}).items():
        key = _snake_case(str(raw_key))
        if key in EARNER_FIELDS:
            fields[key] = PayStub(**_coerce_pay_stub(raw_value, key))
        elif key in PERCENT_FIELDS:
            fields[key] = coerce_percent(raw_value, key)
        elif key == "household_size":
            fields[key] = coerce_household_size(raw_value)
        elif key in AMOUNT_FIELDS:
            fields[key] = coerce_amount(raw_value, key)
        else:
            logger.warning(f"Ignoring unknown input field '{raw_key}'")

    return FinancialInputs(**fields)


def load_inputs_file(path: Union[str, Path]) -> FinancialInputs:
    """Load household inputs from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not contain a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Inputs file not found: {path}")

    with open(path, "r") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Inputs file must contain a mapping, got {type(data).__name__}: {path}")

    # Profiles keep the household under a 'household' key
    if "household" in data and isinstance(data["household"], dict):
        data = data["household"]

    return inputs_from_dict(data)


def parse_override(expr: str) -> tuple[str, str]:
    """Split a KEY=VALUE override expression.

    Raises:
        ValueError: If the expression has no '=' or an empty key
    """
    key, sep, value = expr.partition("=")
    if not sep or not key.strip():
        raise ValueError(f"Override must be KEY=VALUE, got '{expr}'")
    return key.strip(), value.strip()


def apply_overrides(inputs: FinancialInputs, overrides: Mapping[str, Any]) -> FinancialInputs:
    """Return new inputs with dotted-key overrides applied.

    Example:
        apply_overrides(inputs, {"annual_premium": 18000,
                                 "s_corp_owner.gross_pay": 90000})

    Raises:
        KeyError: If an override names an unknown field
    """
    data = inputs.model_dump()
    for raw_key, value in overrides.items():
        parts = [_snake_case(p) for p in str(raw_key).split(".")]
        if len(parts) == 1 and parts[0] in data and parts[0] not in EARNER_FIELDS:
            data[parts[0]] = value
        elif len(parts) == 2 and parts[0] in EARNER_FIELDS and parts[1] in PAY_STUB_FIELDS:
            data[parts[0]][parts[1]] = value
        else:
            raise KeyError(f"Unknown input field '{raw_key}'")
    return inputs_from_dict(data)


def default_inputs() -> FinancialInputs:
    """Sample household: owner-employee plus W-2 spouse, family of three."""
    return FinancialInputs(
        s_corp_owner=PayStub(
            gross_pay=80000,
            fed_withholding=8500,
            social_security=4960,
            medicare=1160,
            state_withholding=4200,
            pre_tax_401k=5000,
            hsa_contribution=3000,
        ),
        spouse=PayStub(
            gross_pay=45000,
            fed_withholding=3200,
            social_security=2790,
            medicare=653,
            state_withholding=2100,
            pre_tax_401k=2500,
            hsa_contribution=1000,
        ),
        other_income=5000,
        tax_exempt_interest=0,
        non_taxable_social_security=0,
        annual_premium=15000,
        capital_losses=0,
        marginal_tax_rate=24,
        estimated_subsidy=8000,
        household_size=3,
        plan_deductible=14200,
        plan_oop_max=14200,
        plan_coinsurance=0,
    )
