"""Change classification rules."""

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from storewatch.config import settings


class ChangeType(str, Enum):
    """Kinds of user-facing catalog changes."""

    PRICE_DROPPED = "priceDropped"
    PRICE_INCREASED = "priceIncreased"
    BACK_IN_STOCK = "backInStock"
    OUT_OF_STOCK = "outOfStock"
    NEW_PRODUCT = "newProduct"
    PRODUCT_REMOVED = "productRemoved"
    IMAGES_CHANGED = "imagesChanged"


class ChangeMagnitude(str, Enum):
    """How prominently a change should be surfaced."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


# Leading decimal number, the way storefront price strings are read
_LEADING_NUMBER = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_price(value: Optional[str]) -> Optional[Decimal]:
    """
    Read the leading decimal number of a price string.

    Trailing text is ignored ("12.50 USD" -> 12.50). Returns None when the
    string does not start with a number.
    """
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER.match(value)
    if not match:
        return None
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def calculate_magnitude(old_price: str, new_price: str) -> ChangeMagnitude:
    """
    Classify a price change by its percentage of the old price.

    A zero (or unreadable) base price has no percentage and is always
    MEDIUM.

    Examples:
        "100.00" -> "95.00": SMALL (5%)
        "100.00" -> "85.00": MEDIUM (15%)
        "100.00" -> "50.00": LARGE (50%)
        "0.00" -> "29.99": MEDIUM
    """
    old = parse_price(old_price)
    new = parse_price(new_price)
    if old is None or new is None or old == 0:
        return ChangeMagnitude.MEDIUM

    percent_change = abs(new - old) / old * 100

    if percent_change > Decimal(str(settings.magnitude_large_threshold)):
        return ChangeMagnitude.LARGE
    if percent_change > Decimal(str(settings.magnitude_medium_threshold)):
        return ChangeMagnitude.MEDIUM
    return ChangeMagnitude.SMALL
