"""Runtime settings for the StreamDock driver.

Values come from, in increasing priority:

1. Built-in defaults (StreamDock VID/PID, interface 0, ...)
2. ``~/.config/streamdock/config.json`` (XDG-compliant, read-only)
3. ``STREAMDOCK_*`` environment variables

The driver never writes the config file.

Usage:
    from streamdock.conf import settings

    settings.vid            # USB vendor id
    settings.pid            # USB product id
    settings.brightness     # applied by the fill and listen commands
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .usb_transport import (
    DEFAULT_READ_SIZE,
    DEFAULT_READ_TIMEOUT_MS,
    DEFAULT_WRITE_TIMEOUT_MS,
    STREAMDOCK_PID,
    STREAMDOCK_VID,
    USB_INTERFACE,
)

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'streamdock')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

ENV_PREFIX = 'STREAMDOCK_'


def load_config(path: str = CONFIG_PATH) -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    if not isinstance(config, dict):
        log.warning("Ignoring %s: top-level value is not an object", path)
        return {}
    return config


def _parse_int(value) -> int:
    """Parse ints given as numbers, decimal strings or 0x-prefixed hex."""
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    return int(str(value).strip(), 0)


# =========================================================================
# Settings
# =========================================================================

@dataclass
class Settings:
    """Device and transport settings."""
    vid: int = STREAMDOCK_VID
    pid: int = STREAMDOCK_PID
    interface: int = USB_INTERFACE
    read_size: int = DEFAULT_READ_SIZE
    write_timeout_ms: int = DEFAULT_WRITE_TIMEOUT_MS
    read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS
    brightness: int = 0x19

    def update(self, values: Mapping, source: str) -> None:
        """Apply integer overrides; bad values are logged and skipped."""
        for f in fields(self):
            if f.name not in values:
                continue
            try:
                setattr(self, f.name, _parse_int(values[f.name]))
            except (TypeError, ValueError):
                log.warning("Ignoring invalid %s from %s: %r",
                            f.name, source, values[f.name])

    @classmethod
    def load(cls, path: str = CONFIG_PATH,
             environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Defaults, then config file, then environment."""
        environ = os.environ if environ is None else environ
        settings = cls()
        settings.update(load_config(path), path)
        settings.update(_env_values(environ), 'environment')
        return settings


def _env_values(environ: Mapping[str, str]) -> dict:
    values = {}
    for f in fields(Settings):
        key = ENV_PREFIX + f.name.upper()
        if key in environ:
            values[f.name] = environ[key]
    return values


# Module-level instance, import and use directly
settings = Settings.load()
