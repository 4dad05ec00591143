"""Saved CLI defaults, kept as JSON in ~/.caf/config.json."""

import json
from pathlib import Path
from typing import Any, Optional

CONFIG_FILE = Path.home() / ".caf" / "config.json"

# Defaults used by `caf-rpc request` / `caf-rpc notify` when flags are omitted.
KEYS = ("token", "from", "session_id")


def load_config() -> dict:
    try:
        cfg = json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps({k: v for k, v in cfg.items() if k in KEYS}, indent=2))


def resolve(key: str, override: Optional[str], fallback: Any) -> Any:
    """Flag value if given, else the saved default, else ``fallback``."""
    if override:
        return override
    return load_config().get(key, fallback)
