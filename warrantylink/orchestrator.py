import os
import json
import time
import yaml
import uuid
from typing import Dict, Any, List, Optional

from pydantic import ValidationError

from warrantylink.models import Bundle, Product
from warrantylink.pipeline import run_linkage_pipeline
from warrantylink.utils import write_output, validate_config, get_logger, load_file, now_utc

logger = get_logger(__name__)


def _read_document(path: str) -> Any:
    raw = load_file(path)
    if path.lower().endswith(".json"):
        return json.loads(raw)
    return yaml.safe_load(raw)


def load_products(path: str, include_archived: bool = False) -> List[Product]:
    """Load a product snapshot exported by the storage layer.

    The document is either a list of products or an object with a
    ``products`` list. Archived products are dropped unless requested.
    """
    doc = _read_document(path)
    if isinstance(doc, dict):
        doc = doc.get("products")
    if not isinstance(doc, list):
        raise ValueError(f"Input {path} must be a list of products or an object with a 'products' list")

    try:
        products = [Product.model_validate(x) for x in doc]
    except ValidationError as e:
        raise ValueError(f"Input validation error in {path}: {e}") from e

    if not include_archived:
        kept = [p for p in products if not p.is_archived]
        if len(kept) != len(products):
            logger.info("input: dropped archived=%d", len(products) - len(kept))
        products = kept
    return products


def bundles_to_json(bundles: List[Bundle], *, run_id: Optional[str] = None, total_products: Optional[int] = None) -> Dict[str, Any]:
    out = []
    for b in bundles:
        js = b.to_json()
        pair = b.warranty_pair()
        js["warrantyPair"] = {
            "primary": pair.primary.model_dump(mode="json", by_alias=True) if pair.primary else None,
            "extended": pair.extended.model_dump(mode="json", by_alias=True) if pair.extended else None,
        }
        out.append(js)
    if total_products is None:
        total_products = sum(len(b.member_ids()) for b in bundles)
    return {
        "generated_at": now_utc().isoformat().replace("+00:00", "Z"),
        "run_id": run_id,
        "stats": {
            "products": total_products,
            "bundles": len(bundles),
            "linked_bundles": sum(1 for b in bundles if b.linked_products),
            "enhanced": sum(1 for b in bundles if b.has_enhanced_protection),
        },
        "bundles": out,
    }


def _apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    if not overrides:
        return

    inp = cfg.setdefault("input", {})
    if overrides.get("input_path") is not None:
        inp["path"] = overrides["input_path"]
    if overrides.get("include_archived") is not None:
        inp["include_archived"] = overrides["include_archived"]

    # Linkage
    if overrides.get("window_days") is not None or overrides.get("keywords") is not None:
        lk = cfg.setdefault("processing", {}).setdefault("linkage", {})
        if overrides.get("window_days") is not None:
            lk["window_days"] = int(overrides["window_days"])  # type: ignore[arg-type]
        if overrides.get("keywords") is not None:
            lk["keywords"] = list(overrides["keywords"])

    if overrides.get("output_dir") is not None:
        cfg.setdefault("output", {})["dir"] = overrides["output_dir"]


def _execute_pipeline(cfg: Dict[str, Any], run_id: str) -> List[str]:
    """Execute the linkage pipeline with given configuration."""
    in_cfg = cfg["input"]
    logger.info("config loaded input=%s output=%s", in_cfg["path"], cfg["output"]["dir"])

    t0 = time.monotonic()
    products = load_products(in_cfg["path"], include_archived=bool(in_cfg.get("include_archived", False)))
    logger.info("loaded products=%d took_ms=%d", len(products), int((time.monotonic()-t0)*1000))

    t1 = time.monotonic()
    bundles = run_linkage_pipeline(products, cfg.get("processing"))
    logger.info("processed bundles=%d took_ms=%d", len(bundles), int((time.monotonic()-t1)*1000))

    js = bundles_to_json(bundles, run_id=run_id, total_products=len(products))
    generated_files = write_output(js, cfg["output"])
    logger.info("output written dir=%s files=%d", cfg["output"]["dir"], len(generated_files))
    return generated_files


def run_once(config_path: str, *, overrides: Optional[Dict[str, Any]] = None) -> List[str]:
    """Execute pipeline once with given config file path."""
    run_id = uuid.uuid4().hex[:8]
    logger.info("=== run start id=%s ===", run_id)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
        _apply_overrides(cfg, overrides)
        validate_config(cfg)
        in_path = cfg["input"]["path"]
        if not os.path.isabs(in_path) and not os.path.exists(in_path):
            # Relative input paths may be given relative to the config file
            candidate = os.path.join(os.path.dirname(os.path.abspath(config_path)), in_path)
            if os.path.exists(candidate):
                cfg["input"]["path"] = candidate
        return _execute_pipeline(cfg, run_id)

    except Exception as e:
        logger.error("Pipeline execution failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
