"""JSON file persistence shared by the repositories."""
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from threading import RLock
from typing import Any, List

logger = logging.getLogger(__name__)

# Held by API handlers around each read-modify-write of the data files.
store_lock = RLock()


def read_records(path: Path, label: str) -> List[dict]:
    """Read a JSON list from path with proper error handling.

    Missing file -> empty list. Invalid JSON or a non-list document is logged
    and treated as empty.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"{label} file not found: {path}. Returning empty list.")
        return []
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {label} file: {e}")
        return []
    if not isinstance(data, list):
        logger.error(f"Expected a list in {label} file {path}, got {type(data).__name__}")
        return []
    return [entry for entry in data if isinstance(entry, dict)]


def atomic_write(path: Path, records: List[Any]) -> None:
    """Write records to path via a temp file in the same directory, then move it into place."""
    directory = os.path.dirname(path)
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{Path(path).stem}_", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            json.dump(records, tmp, indent=2, ensure_ascii=False)
        shutil.move(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
