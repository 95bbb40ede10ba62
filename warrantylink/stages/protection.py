from __future__ import annotations

from typing import Dict, List, Sequence

from warrantylink.models import Bundle, Product, Warranty, WarrantyPair, WarrantyType

# Lower rank wins; unknown types sort after every known one.
TYPE_PRIORITY: Dict[str, int] = {
    WarrantyType.MANUFACTURER.value: 1,
    WarrantyType.STORE.value: 2,
    WarrantyType.EXTENDED.value: 3,
    WarrantyType.INSURANCE.value: 4,
}
UNKNOWN_PRIORITY = 5


def _priority(w: Warranty) -> int:
    return TYPE_PRIORITY.get(w.warranty_type, UNKNOWN_PRIORITY)


def merge_warranties(main_product: Product, linked_products: Sequence[Product] = ()) -> List[Warranty]:
    merged: List[Warranty] = list(main_product.warranties)
    for p in linked_products:
        merged.extend(p.warranties)
    return merged


def has_enhanced_protection(warranties: Sequence[Warranty] = ()) -> bool:
    """True when the warranties span more than one distinct type."""
    if len(warranties) < 2:
        return False
    return len({w.warranty_type for w in warranties}) > 1


def primary_extended_pair(warranties: Sequence[Warranty] = ()) -> WarrantyPair:
    if not warranties:
        return WarrantyPair()
    # sorted() is stable: equal ranks keep their original order.
    ranked = sorted(warranties, key=_priority)
    return WarrantyPair(
        primary=ranked[0],
        extended=ranked[1] if len(ranked) > 1 else None,
        has_enhanced=has_enhanced_protection(warranties),
    )


def classify_bundle(members: Sequence[Product]) -> Bundle:
    """Build a bundle from a main-first component."""
    if not members:
        raise ValueError("classify_bundle requires at least one product")
    main, linked = members[0], list(members[1:])
    merged = merge_warranties(main, linked)
    return Bundle(
        main_product=main.model_copy(update={"warranties": merged}),
        linked_products=linked,
        has_enhanced_protection=has_enhanced_protection(merged),
    )
