"""Shared helpers for product extraction strategies."""

from typing import Any, Callable, List, Optional

from storewatch.ingest.base import ExtractionResult, ScriptTag

# A strategy scans a page's scripts and either recovers a product or passes
StrategyFunc = Callable[[List[ScriptTag]], Optional[ExtractionResult]]


def is_present(value: Any) -> bool:
    """Whether an embedded field counts as set: any object or array, else truthy."""
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def has_any_field(obj: Any, *keys: str) -> bool:
    """Whether ``obj`` is a mapping with at least one of ``keys`` set."""
    return isinstance(obj, dict) and any(is_present(obj.get(key)) for key in keys)
