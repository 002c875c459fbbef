"""Target-level preference persistence (JSON key-value file + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import tempfile
from pathlib import Path

import structlog

from ..config import get_settings
from ..models.level import Level

logger = structlog.get_logger()

TARGET_LEVEL_STORAGE_KEY = "opic.targetLevel"
PREFERENCES_FILENAME = "preferences.json"


def get_store_path() -> Path:
    return get_settings().storage_dir / PREFERENCES_FILENAME


def _read_store(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        fcntl.flock(f, fcntl.LOCK_SH)
        data = json.load(f)
        fcntl.flock(f, fcntl.LOCK_UN)
    return data if isinstance(data, dict) else {}


def _write_store(path: Path, data: dict[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, delete=False, suffix=".json", encoding="utf-8"
    ) as tmp:
        json.dump(data, tmp, indent=2)
    os.replace(tmp.name, path)


def load_target_level() -> Level | None:
    """Return the stored target level, or None if unset or not a valid level."""
    path = get_store_path()
    try:
        stored = _read_store(path).get(TARGET_LEVEL_STORAGE_KEY)
    except json.JSONDecodeError:
        logger.warning("preferences_parse_error", path=str(path))
        return None
    level = Level.parse(stored)
    if stored is not None and level is None:
        logger.warning("stored_target_level_invalid", value=stored)
    return level


def save_target_level(level: Level) -> None:
    path = get_store_path()
    lock_path = path.with_suffix(".lock")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        try:
            data = _read_store(path)
        except json.JSONDecodeError:
            data = {}
        data[TARGET_LEVEL_STORAGE_KEY] = level.value
        _write_store(path, data)
    logger.info("target_level_saved", level=level.value)


def clear_target_level() -> None:
    path = get_store_path()
    lock_path = path.with_suffix(".lock")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        try:
            data = _read_store(path)
        except json.JSONDecodeError:
            data = {}
        if data.pop(TARGET_LEVEL_STORAGE_KEY, None) is not None:
            _write_store(path, data)
    logger.info("target_level_cleared")
