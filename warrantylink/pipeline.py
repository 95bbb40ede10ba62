from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from warrantylink.models import Bundle, Product
from warrantylink.stages.bundling import resolve_components
from warrantylink.stages.detector import DEFAULT_WINDOW_DAYS, WARRANTY_KEYWORDS
from warrantylink.stages.linkage import build_adjacency
from warrantylink.stages.protection import classify_bundle
from warrantylink.utils import get_logger

logger = get_logger(__name__)


def _linkage_params(cfg: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    lk = ((cfg or {}).get("linkage") or {})
    return {
        "window_days": int(lk.get("window_days", DEFAULT_WINDOW_DAYS)),
        "keywords": tuple(lk.get("keywords") or WARRANTY_KEYWORDS),
    }


def run_linkage_pipeline(products: Sequence[Product], cfg: Optional[Dict[str, Any]] = None) -> List[Bundle]:
    """Group a snapshot of products into bundles.

    ``cfg`` is the ``processing`` section of the runtime configuration; when
    omitted the fixed defaults apply.
    """
    if not products:
        return []
    params = _linkage_params(cfg)
    adjacency = build_adjacency(products, **params)
    components = resolve_components(products, adjacency)
    bundles = [classify_bundle(members) for members in components]
    logger.info(
        "pipeline.bundles: bundles=%d enhanced=%d from=%d",
        len(bundles),
        sum(1 for b in bundles if b.has_enhanced_protection),
        len(products),
    )
    return bundles
