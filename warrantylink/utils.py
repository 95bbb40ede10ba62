import os
import json
import datetime as dt
import logging
from logging.handlers import TimedRotatingFileHandler
from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError
from email.utils import parsedate_to_datetime
from typing import Optional, Any, List

# ---------- Time helpers ----------

def now_utc():
    return dt.datetime.now(dt.timezone.utc)

def _to_utc(dt_obj: dt.datetime) -> dt.datetime:
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=dt.timezone.utc)
    return dt_obj.astimezone(dt.timezone.utc)

def parse_date_safe(raw: Any) -> Optional[dt.date]:
    """Best-effort parsing of purchase dates coming from the storage layer.

    Accepts ``date``/``datetime`` objects and strings. Returns the calendar
    date (UTC for timezone-aware values) on success, otherwise ``None``.
    """

    if raw is None:
        return None
    if isinstance(raw, dt.datetime):
        return _to_utc(raw).date()
    if isinstance(raw, dt.date):
        return raw
    if not isinstance(raw, str):
        return None

    raw = raw.strip()
    if not raw:
        return None

    # Fast path: ISO 8601 (date only, or with time and optional trailing Z)
    iso_candidate = raw
    if raw.endswith("Z"):
        iso_candidate = raw[:-1] + "+00:00"

    try:
        return dt.date.fromisoformat(iso_candidate)
    except ValueError:
        pass

    try:
        return _to_utc(dt.datetime.fromisoformat(iso_candidate)).date()
    except ValueError:
        pass

    # RFC 2822 / email style timestamps
    try:
        dt_obj = parsedate_to_datetime(raw)
        if dt_obj:
            return _to_utc(dt_obj).date()
    except (TypeError, ValueError):
        pass

    # Legacy fallbacks for custom formats
    for fmt in ("%Y-%m-%d %H:%M:%S%z", "%Y/%m/%d", "%m/%d/%Y"):
        try:
            return _to_utc(dt.datetime.strptime(raw, fmt)).date()
        except ValueError:
            continue

    return None

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def validate_config(cfg: dict):
    here = os.path.dirname(os.path.abspath(__file__))
    schema_path = os.path.join(here, "schemas", "config.schema.json")
    schema = json.loads(load_file(schema_path))
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ValueError(f"Config validation error: {e.message} at {list(e.path)}") from e

# ---------- Output writer ----------

def write_output(json_obj: dict, out_cfg: dict) -> List[str]:
    out_dir = out_cfg["dir"]
    formats = out_cfg.get("formats") or ["json"]
    os.makedirs(out_dir, exist_ok=True)
    now_local = dt.datetime.now().astimezone()
    ts = now_local.strftime("%Y%m%dT%H%M%S%z")
    base = os.path.join(out_dir, f"bundles_{ts}")

    generated_files = []

    if "json" in formats:
        json_path = base + ".json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(json_obj, f, ensure_ascii=False, indent=2)
        generated_files.append(json_path)

    if "jsonl" in formats:
        jsonl_path = base + ".jsonl"
        with open(jsonl_path, "w", encoding="utf-8") as f:
            for bundle in json_obj.get("bundles", []):
                f.write(json.dumps(bundle, ensure_ascii=False) + "\n")
        generated_files.append(jsonl_path)

    return generated_files

# ---------- Logging ----------

_LOGGER_INITIALIZED = False
_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

class JsonFormatter(logging.Formatter):
    """One JSON object per line; pipeline stages log ``stage.name: k=v`` messages."""

    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.name.startswith("warrantylink.stages."):
            payload["stage"] = record.name.rsplit(".", 1)[-1]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _log_handlers(log_dir: Optional[str], json_mode: bool, file_name: str = "warranty-linkage.log") -> List[logging.Handler]:
    """Console handler, plus a daily rotating file when ``log_dir`` is set."""
    fmt = JsonFormatter() if json_mode else logging.Formatter(_TEXT_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(os.path.join(log_dir, file_name), when="D", backupCount=7, encoding="utf-8")
        )
    for h in handlers:
        h.setFormatter(fmt)
    return handlers

def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    # LOG_DIR="" keeps logging on the console only
    log_dir = os.getenv("LOG_DIR", "logs")
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"
    file_name = os.getenv("LOG_FILE", "warranty-linkage.log")

    root = logging.getLogger()
    root.setLevel(level)
    for h in _log_handlers(log_dir, json_mode, file_name):
        h.setLevel(level)
        root.addHandler(h)

    _LOGGER_INITIALIZED = True

def get_logger(name: str = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
