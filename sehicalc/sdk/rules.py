"""Coverage rules loading.

Year-specific constants (poverty guidelines, subsidy cliff, capital loss
limit, usage tiers) live in coverage-rules/YYYY.yaml so they can be swapped
each year without touching the comparison logic.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import yaml

from .schemas import CoverageRules

logger = logging.getLogger(__name__)

DEFAULT_COVERAGE_YEAR = 2026


def _get_rules_dir() -> Path:
    """Get the coverage-rules directory path."""
    package_root = Path(__file__).parent.parent  # sdk -> sehicalc
    return package_root / "coverage-rules"


def get_available_years() -> list[int]:
    """Get sorted list of available coverage rule years (descending)."""
    rules_dir = _get_rules_dir()
    years = [int(p.stem) for p in rules_dir.glob("*.yaml") if p.stem.isdigit()]
    return sorted(years, reverse=True)


def resolve_rules_year(year: Union[int, str]) -> int:
    """Pick the rules year to use for a requested coverage year.

    Falls back to the newest table at or before the requested year. If the
    requested year predates every table, the oldest table is used.

    Raises:
        FileNotFoundError: If no coverage rules are installed at all
    """
    available = get_available_years()
    if not available:
        raise FileNotFoundError(f"No coverage rules found in {_get_rules_dir()}")

    target = int(year)
    candidates = [y for y in available if y <= target]
    resolved = candidates[0] if candidates else available[-1]
    if resolved != target:
        logger.info(f"No coverage rules for {target}, using {resolved}")
    return resolved


def load_rules_file(path: Union[str, Path]) -> CoverageRules:
    """Load and validate a coverage rules YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the file does not match the schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Coverage rules file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    return CoverageRules.model_validate(data)


@lru_cache(maxsize=None)
def _load_year(year: int) -> CoverageRules:
    return load_rules_file(_get_rules_dir() / f"{year}.yaml")


def load_coverage_rules(year: Optional[Union[int, str]] = None) -> CoverageRules:
    """Load coverage rules for a year (default: DEFAULT_COVERAGE_YEAR).

    Results are cached per resolved year; CoverageRules is immutable.
    """
    if year is None:
        year = DEFAULT_COVERAGE_YEAR
    return _load_year(resolve_rules_year(year))
