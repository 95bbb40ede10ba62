from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Tuple

from warrantylink.models import Product
from warrantylink.utils import parse_date_safe

WARRANTY_KEYWORDS: Tuple[str, ...] = ("warranty", "protection", "care", "extended", "premium")
DEFAULT_WINDOW_DAYS = 30


class LinkRule(str, Enum):
    EXACT = "exact"
    SERIAL = "serial"
    CONTAINMENT = "containment"
    KEYWORD_DATE = "keyword_date"


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _exact_match(a: Product, b: Product) -> bool:
    if not (a.brand and b.brand):
        return False
    return a.product_name == b.product_name and a.brand == b.brand


def _serial_match(a: Product, b: Product) -> bool:
    if not (_present(a.serial_number) and _present(b.serial_number)):
        return False
    return a.serial_number == b.serial_number


def _containment_match(a: Product, b: Product) -> bool:
    name_a = (a.product_name or "").strip().lower()
    name_b = (b.product_name or "").strip().lower()
    if not name_a or not name_b:
        return False
    return name_a in name_b or name_b in name_a


def _keyword_date_match(a: Product, b: Product, window_days: int, keywords: Iterable[str]) -> bool:
    name_a = (a.product_name or "").lower()
    name_b = (b.product_name or "").lower()
    if not any(kw in name_a or kw in name_b for kw in keywords):
        return False
    # Two unbranded rows count as the same brand; one-sided brands do not.
    if (a.brand or None) != (b.brand or None):
        return False
    date_a = parse_date_safe(a.purchase_date)
    date_b = parse_date_safe(b.purchase_date)
    if date_a is None or date_b is None:
        return False
    return abs((date_a - date_b).days) <= window_days


def link_reason(
    a: Product,
    b: Product,
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    keywords: Iterable[str] = WARRANTY_KEYWORDS,
) -> Optional[LinkRule]:
    """Return the first rule of the cascade that links ``a`` and ``b``.

    Rules are evaluated in order: exact name+brand, serial number, name
    containment, then warranty keyword with brand and purchase-date proximity.
    A rule whose inputs are missing or unparseable simply does not apply.
    """
    if _exact_match(a, b):
        return LinkRule.EXACT
    if _serial_match(a, b):
        return LinkRule.SERIAL
    if _containment_match(a, b):
        return LinkRule.CONTAINMENT
    kws = tuple(k.lower() for k in keywords)
    if _keyword_date_match(a, b, window_days, kws):
        return LinkRule.KEYWORD_DATE
    return None


def is_linked(
    a: Product,
    b: Product,
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    keywords: Iterable[str] = WARRANTY_KEYWORDS,
) -> bool:
    return link_reason(a, b, window_days=window_days, keywords=keywords) is not None
