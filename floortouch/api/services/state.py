"""Process-wide settings and the single `TouchEngine` the routes share.

Settings changes that only affect detection are pushed into the running
engine so its floor baseline survives; changing the source or the frame
geometry reopens the sensor with a fresh engine.
"""

from __future__ import annotations

import logging
from threading import RLock

from floortouch.api.services.engine import TouchEngine
from floortouch.core.config.settings import TouchSettings, load_settings, settings_to_dict

logger = logging.getLogger(__name__)

# Fields consumed when the depth source is opened.
SOURCE_FIELDS = ("source", "frame_width", "frame_height", "synthetic_noise")

_settings: TouchSettings | None = None
_engine: TouchEngine | None = None
_lock = RLock()


def get_settings() -> TouchSettings:
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def needs_restart(old: TouchSettings, new: TouchSettings) -> bool:
    return any(getattr(old, name) != getattr(new, name) for name in SOURCE_FIELDS)


def reload_settings(data: dict | None = None) -> TouchSettings:
    """Re-read settings from disk, merge `data` on top and apply the result.

    Raises:
        ValueError: when the merged settings do not validate; nothing changes.
    """

    global _settings, _engine
    with _lock:
        base = load_settings()
        new = TouchSettings(**{**settings_to_dict(base), **data}) if data else base
        _settings = new
        if _engine is None:
            return new
        if needs_restart(_engine.settings, new):
            logger.info("Depth source settings changed; restarting touch engine")
            _engine.stop()
            _engine = TouchEngine(new)
            _engine.start()
        else:
            _engine.apply(new)
        return new


def peek_engine() -> TouchEngine | None:
    """Return the engine if one exists, without creating it."""

    with _lock:
        return _engine


def get_engine() -> TouchEngine:
    """Return the shared engine, creating and starting it on first use."""

    global _engine
    with _lock:
        if _engine is None:
            _engine = TouchEngine(get_settings())
            _engine.start()
        return _engine


def stop_engine() -> None:
    global _engine
    with _lock:
        if _engine is not None:
            _engine.stop()
            _engine = None
