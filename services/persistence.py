import json
import logging
import os
import tempfile
import shutil
from typing import Dict, Any, Optional

from utils.paths import data_dir

logger = logging.getLogger(__name__)

DATA_DIR = os.path.normpath(data_dir())

FILES = {
    'session': 'session.json',
}


def _path(key: str) -> str:
    return os.path.join(DATA_DIR, FILES[key])


def load_document(key: str) -> Optional[Dict[str, Any]]:
    file_path = _path(key)
    if not os.path.exists(file_path):
        return None
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", file_path, e)
        return None
    return data if isinstance(data, dict) else None


def atomic_write(key: str, data: Dict[str, Any]):
    file_path = _path(key)
    os.makedirs(os.path.dirname(file_path), exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(
        prefix='tmp_', suffix='.json', dir=os.path.dirname(file_path))
    try:
        with os.fdopen(tmp_fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    except (OSError, TypeError, ValueError):
        os.remove(tmp_path)
        raise
    shutil.move(tmp_path, file_path)


def remove(key: str):
    file_path = _path(key)
    if os.path.exists(file_path):
        os.remove(file_path)
