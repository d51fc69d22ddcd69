"""Product extraction strategy registry."""

from __future__ import annotations

from storewatch.ingest.base import ExtractionStrategy
from storewatch.ingest.strategies.base import StrategyFunc, has_any_field, is_present
from storewatch.ingest.strategies.data_product_json import try_data_product_json
from storewatch.ingest.strategies.meta_variable import try_meta_variable
from storewatch.ingest.strategies.product_variable import try_product_variable
from storewatch.ingest.strategies.generic_assignment import try_generic_assignment
from storewatch.ingest.strategies.json_ld import try_json_ld


# Priority order: earlier strategies win when several match a page
_STRATEGIES: dict[ExtractionStrategy, StrategyFunc] = {
    ExtractionStrategy.DATA_PRODUCT_JSON: try_data_product_json,
    ExtractionStrategy.META_VARIABLE: try_meta_variable,
    ExtractionStrategy.PRODUCT_VARIABLE: try_product_variable,
    ExtractionStrategy.GENERIC_ASSIGNMENT: try_generic_assignment,
    ExtractionStrategy.JSON_LD: try_json_ld,
}


def get_strategy_chain() -> list[tuple[ExtractionStrategy, StrategyFunc]]:
    """Return (name, strategy) pairs in priority order."""
    return list(_STRATEGIES.items())


def get_strategy(strategy: ExtractionStrategy | str) -> StrategyFunc:
    """Return a single strategy by name."""
    return _STRATEGIES[ExtractionStrategy(strategy)]


__all__ = [
    "StrategyFunc",
    "get_strategy",
    "get_strategy_chain",
    "has_any_field",
    "is_present",
]
