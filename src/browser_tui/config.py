from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
HOME_URL = "about:home"
BLANK_URL = "about:blank"
HTTP_TIMEOUT = 15

CONFIG_DIR = os.path.expanduser("~/.config/browser")
CONFIG_PATH = os.path.join(CONFIG_DIR, "config.json")
HISTORY_FILE = os.path.join(CONFIG_DIR, "history.json")
READING_LIST_FILE = os.path.join(CONFIG_DIR, "reading_list.json")
CACHE_DIR = os.path.expanduser("~/.cache/browser")
CACHE_TTL = 600

REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64; rv:115.0) "
        "Gecko/20100101 browser-tui/0.1"
    )
}
RETRY_ATTEMPTS = 3
INITIAL_RETRY_DELAY = 0.5

DEFAULT_CONFIG: Dict[str, Any] = {
    "theme": "textual-dark",
    "persist": True,
    "reader": {"theme": None, "width": "wide"},
}

# Default UI settings
UI_DEFAULTS = {
    "statusbar_keybindings": (
        "[b {color}]ctrl+l[/] url, [b {color}]ctrl+t[/] tabs, "
        "[b {color}]ctrl+y[/] history, [b {color}]R[/] reader"
    ),
}

# --- Logging ---
logger = logging.getLogger("browser")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/browser_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def _load_json(path: str, default: Any) -> Any:
    if not os.path.exists(path):
        return default
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return default


def _save_json(path: str, data: Any) -> None:
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except IOError as e:
        logger.error("Failed to write %s: %s", path, e)


def load_history() -> list[dict]:
    """Load the persisted history entries."""
    data = _load_json(HISTORY_FILE, [])
    return data if isinstance(data, list) else []


def save_history(entries: list[dict]) -> None:
    """Save history entries."""
    _save_json(HISTORY_FILE, entries)


def load_reading_list() -> list[dict]:
    """Load the saved reading list items."""
    data = _load_json(READING_LIST_FILE, [])
    return data if isinstance(data, list) else []


def save_reading_list(items: list[dict]) -> None:
    """Save reading list items."""
    _save_json(READING_LIST_FILE, items)


def ensure_config_file_exists() -> None:
    """Write the default config file if the user's config file is not found."""
    if not os.path.exists(CONFIG_PATH):
        logger.info("Config file not found at %s, creating default.", CONFIG_PATH)
        _save_json(CONFIG_PATH, DEFAULT_CONFIG)


def load_config() -> Dict[str, Any]:
    """Load the main configuration file, filling in missing defaults."""
    ensure_config_file_exists()
    config = dict(DEFAULT_CONFIG)
    try:
        with open(CONFIG_PATH, "r") as f:
            data = json.load(f)
        if isinstance(data, dict):
            config.update(data)
            logger.info("Loaded config from %s", CONFIG_PATH)
        else:
            logger.error("Ignoring config at %s: expected an object", CONFIG_PATH)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", CONFIG_PATH, e)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """Save the main configuration file."""
    _save_json(CONFIG_PATH, config)
    logger.info("Saved config to %s", CONFIG_PATH)
