"""Durable key-value document stores (whole-document get/set semantics)."""
import copy
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from cafeteria.infra.paths import document_path

logger = logging.getLogger(__name__)


class DocumentStore:
    """Named JSON-compatible documents, read and written whole."""

    def get(self, name: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, name: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, name: str) -> None:
        raise NotImplementedError


class MemoryStore(DocumentStore):
    """In-process store; values are deep-copied so callers never share references."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._docs: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, name: str) -> Optional[Any]:
        if name not in self._docs:
            return None
        return copy.deepcopy(self._docs[name])

    def set(self, name: str, value: Any) -> None:
        self._docs[name] = copy.deepcopy(value)

    def delete(self, name: str) -> None:
        self._docs.pop(name, None)


class JsonFileStore(DocumentStore):
    """One `<name>.json` file per document inside data_dir."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def get(self, name: str) -> Optional[Any]:
        path = document_path(self.data_dir, name)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {path.name}: {e}")
            return None

    def set(self, name: str, value: Any) -> None:
        path = document_path(self.data_dir, name)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.data_dir), prefix=f".{name}_", suffix=".json")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                json.dump(value, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def delete(self, name: str) -> None:
        path = document_path(self.data_dir, name)
        if path.exists():
            path.unlink()
