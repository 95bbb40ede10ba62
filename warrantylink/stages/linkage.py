from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set

from warrantylink.models import Product
from warrantylink.stages.detector import DEFAULT_WINDOW_DAYS, WARRANTY_KEYWORDS, LinkRule, link_reason
from warrantylink.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Link:
    a_id: str
    b_id: str
    rule: LinkRule


def detect_links(
    products: Sequence[Product],
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    keywords: Iterable[str] = WARRANTY_KEYWORDS,
) -> List[Link]:
    kws = tuple(keywords)
    links: List[Link] = []
    n = len(products)
    for i in range(n):
        a = products[i]
        for j in range(i + 1, n):
            b = products[j]
            rule = link_reason(a, b, window_days=window_days, keywords=kws)
            if rule is not None:
                logger.debug("linkage.pair: %s <-> %s rule=%s", a.id, b.id, rule.value)
                links.append(Link(a.id, b.id, rule))

    by_rule = Counter(link.rule.value for link in links)
    logger.info(
        "linkage.detect: pairs=%d linked=%d from=%d rules=%s",
        n * (n - 1) // 2,
        len(links),
        n,
        dict(by_rule),
    )
    return links


def adjacency_from_links(products: Sequence[Product], links: Iterable[Link]) -> Dict[str, Set[str]]:
    adjacency: Dict[str, Set[str]] = {p.id: set() for p in products}
    for link in links:
        adjacency.setdefault(link.a_id, set()).add(link.b_id)
        adjacency.setdefault(link.b_id, set()).add(link.a_id)
    return adjacency


def build_adjacency(
    products: Sequence[Product],
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    keywords: Iterable[str] = WARRANTY_KEYWORDS,
) -> Dict[str, Set[str]]:
    """Map every product id to the ids it is linked with (symmetric)."""
    links = detect_links(products, window_days=window_days, keywords=keywords)
    return adjacency_from_links(products, links)
