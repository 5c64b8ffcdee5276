"""
callbridge/config.py
Bridge config with auto-detection. Persists to callbridge_config.json.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "callbridge_config.json"

DEFAULT_CONFIG = {
    "channel_prefix": "com.example.calllog",
    "call_store": "sqlite",          # sqlite | xml
    "db_path": "callbridge.db",
    "xml_dir": None,
    "use_adb": False,
    "adb_serial": None,
    "launcher_timeout_sec": 10,
    "host": "127.0.0.1",
    "port": 8765,
}

CALL_STORES = ("sqlite", "xml")

# Common SMS Backup & Restore locations to auto-detect
AUTO_DETECT_PATHS = [
    Path.home() / "SMSBackup",
    Path.home() / "storage" / "shared" / "SMSBackup",     # Termux
    Path("/sdcard/SMSBackup"),
    Path("/sdcard/Download/SMSBackup"),
]


class ConfigError(ValueError):
    pass


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from callbridge_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return {**DEFAULT_CONFIG, **data}
            logger.warning(f"Config {path.name} is not an object, using defaults")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to callbridge_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def auto_detect_xml_dir() -> Optional[Path]:
    """Scan common paths for calls-*.xml files. Returns first match or None."""
    for d in AUTO_DETECT_PATHS:
        try:
            if d.is_dir() and any(d.glob("calls-*.xml")):
                return d
        except OSError:
            continue
    return None


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    if config.get("call_store") not in CALL_STORES:
        raise ConfigError(
            f"call_store must be one of {', '.join(CALL_STORES)}, got {config.get('call_store')!r}"
        )
    if config["call_store"] == "xml" and not config.get("xml_dir"):
        raise ConfigError("call_store 'xml' needs xml_dir")
    try:
        config["port"] = int(config["port"])
        config["launcher_timeout_sec"] = float(config["launcher_timeout_sec"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}")
    return config


def ensure_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load config, apply CALLBRIDGE_DB / CALLBRIDGE_XML_DIR overrides and
    auto-detect xml_dir when the xml store is selected without one.
    Returns merged, validated config.
    """
    config = load_config(project_root)
    if os.environ.get("CALLBRIDGE_DB"):
        config["db_path"] = os.environ["CALLBRIDGE_DB"]
    if os.environ.get("CALLBRIDGE_XML_DIR"):
        config["xml_dir"] = os.environ["CALLBRIDGE_XML_DIR"]
    if config.get("call_store") == "xml" and not config.get("xml_dir"):
        detected = auto_detect_xml_dir()
        if detected:
            config["xml_dir"] = str(detected)
            logger.info(f"Auto-detected XML dir: {detected}")
    return validate_config(config)
