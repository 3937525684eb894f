"""
Project persistence for Mat Studio

- ProjectStore: autosave slot in a key-value store (QSettings). Two keys,
  the serialized document and a version tag; a missing key simply means
  "no saved project".
- write_project_file / read_project_file: explicit save/open of a
  project as a JSON file.
"""

import json
import logging
import re
from datetime import date
from typing import Optional

from PyQt6.QtCore import QSettings

from ..config import DOCUMENT_VERSION, STORAGE_PROJECT_KEY, STORAGE_VERSION_KEY
from .document import DecodeResult, decode_document, encode_document
from .errors import ProjectFileError
from .state import ProjectState

log = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9áéíóúÁÉÍÓÚñÑüÜ\s-]")


def sanitize_name(name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("", name or "").strip()


def project_filename(name: str, day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{sanitize_name(name) or 'playmat-project'}-{day.isoformat()}.json"


class ProjectStore:
    """Autosave slot backed by QSettings"""

    def __init__(self, settings: QSettings):
        self.settings = settings

    def load(self) -> Optional[dict]:
        """
        Returns the saved document as a dict, or None when nothing usable
        is stored. Never raises.
        """
        if not (self.settings.contains(STORAGE_PROJECT_KEY) and self.settings.contains(STORAGE_VERSION_KEY)):
            return None
        raw = self.settings.value(STORAGE_PROJECT_KEY, type=str)
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            log.error("saved project is unreadable, ignoring it: %s", e)
            return None
        if not isinstance(data, dict):
            log.error("saved project is not a JSON object, ignoring it")
            return None
        return data

    def save(self, state: ProjectState) -> bool:
        """Write the autosave slot. Returns False (and logs) on failure."""
        try:
            payload = json.dumps(encode_document(state, include_aux_key=True))
        except (TypeError, ValueError):
            log.error("could not serialize project", exc_info=True)
            return False

        self.settings.setValue(STORAGE_PROJECT_KEY, payload)
        self.settings.setValue(STORAGE_VERSION_KEY, DOCUMENT_VERSION)
        self.settings.sync()
        status = self.settings.status()
        if status != QSettings.Status.NoError:
            log.error("could not write project to storage: %s", status)
            return False
        return True

    def clear(self):
        self.settings.remove(STORAGE_PROJECT_KEY)
        self.settings.remove(STORAGE_VERSION_KEY)
        self.settings.sync()


def write_project_file(path, state: ProjectState):
    log.info("💾 Saving project to %s", path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(encode_document(state), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ProjectFileError(f"could not write {path}: {e}") from e


def read_project_file(path, base: ProjectState) -> DecodeResult:
    """
    Read a project file and apply it over ``base``.

    Raises ProjectFileError if the file cannot be read or is not JSON;
    field-level problems are returned in DecodeResult.issues instead.
    """
    log.info("📂 Loading project from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProjectFileError(f"could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProjectFileError(f"{path} does not contain a project")
    return decode_document(data, base)
