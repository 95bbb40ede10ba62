from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence

from warrantylink.models import Product
from warrantylink.utils import get_logger

logger = get_logger(__name__)


def _find(parent: List[int], x: int) -> int:
    while parent[x] != x:
        parent[x] = parent[parent[x]]
        x = parent[x]
    return x


def _union(parent: List[int], x: int, y: int) -> None:
    rx, ry = _find(parent, x), _find(parent, y)
    if rx == ry:
        return
    # Lower input index stays root: it is the component's main product.
    if rx < ry:
        parent[ry] = rx
    else:
        parent[rx] = ry


def _index_by_id(products: Sequence[Product]) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for i, p in enumerate(products):
        if p.id in index:
            logger.warning("bundling.duplicate_id: id=%s positions=%d,%d", p.id, index[p.id], i)
            continue
        index[p.id] = i
    return index


def resolve_components(
    products: Sequence[Product],
    adjacency: Mapping[str, Iterable[str]],
) -> List[List[Product]]:
    """Group products into connected components of the link graph.

    Each component is returned main-first: the member with the lowest input
    position, followed by the others in input order. Components are ordered by
    the position of their main product. Edges are applied in both directions,
    so a one-sided adjacency is enough.
    """
    index = _index_by_id(products)
    parent = list(range(len(products)))

    unknown = 0
    for src, targets in adjacency.items():
        i = index.get(src)
        if i is None:
            unknown += 1
            continue
        for dst in targets:
            j = index.get(dst)
            if j is None:
                unknown += 1
                continue
            _union(parent, i, j)
    if unknown:
        logger.debug("bundling.unknown_ids: skipped=%d", unknown)

    groups: Dict[int, List[Product]] = {}
    for i, p in enumerate(products):
        groups.setdefault(_find(parent, i), []).append(p)

    components = list(groups.values())
    logger.info(
        "bundling.components: bundles=%d linked=%d from=%d",
        len(components),
        sum(1 for c in components if len(c) > 1),
        len(products),
    )
    return components
