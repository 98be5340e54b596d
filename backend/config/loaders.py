# backend/config/loaders.py
import json
import logging
import os
from typing import Any, Optional

from backend.config import settings
from backend.core.repositories import ConfigService

logger = logging.getLogger("transcripts.loaders")


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: str, data: Any) -> None:
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    os.replace(tmp, path)


class JsonFileConfigRepository:
    """Key-value store where every key is a JSON file in `root`."""

    def __init__(self, root: str):
        self.root = root

    def _path(self, key: str) -> str:
        name = os.path.basename(key)
        if not name or name != key:
            raise ValueError(f"Invalid configuration key: {key!r}")
        return os.path.join(self.root, name)

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not os.path.exists(path):
            logger.info("configuration %s not found under %s", key, self.root)
            return None
        return _read_json(path)

    def save(self, key: str, data: Any) -> None:
        os.makedirs(self.root, exist_ok=True)
        _write_json(self._path(key), data)
        logger.info("saved configuration %s", key)


def load_config_service(root: Optional[str] = None) -> ConfigService:
    return ConfigService(
        JsonFileConfigRepository(root or settings.DATA_DIR),
        requirements_key=settings.REQUIREMENTS_KEY,
        merit_courses_key=settings.MERIT_COURSES_KEY,
        catalog_key=settings.CATALOG_KEY,
    )
