"""
The shared JSON document: collection names, default shape, file persistence

The whole evaluation lives in one JSON object keyed by collection name.
The document service keeps it in a single file; writes are last-write-wins.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict

from evalmate.models import SessionStatus


logger = logging.getLogger(__name__)

TEAMS = "teams"
TEACHER_SCORES = "teacherScores"
PEER_SCORES = "peerScores"
QUESTIONS = "questions"
SESSION = "session"

COLLECTIONS = (TEAMS, TEACHER_SCORES, PEER_SCORES, QUESTIONS, SESSION)

DATA_FILE_NAME = "data.json"

DEFAULT_TIME_LEFT = 600   # seconds


def default_value(name: str, time_left: int = DEFAULT_TIME_LEFT) -> Any:
    """Empty value for a collection: a list, or the default session"""
    if name == SESSION:
        return SessionStatus(time_left=time_left).to_json()
    return []


def default_document() -> Dict[str, Any]:
    return {name: default_value(name) for name in COLLECTIONS}


def is_well_formed(name: str, value: Any) -> bool:
    """Check the JSON type of a collection value (list, or object for session)"""
    if name == SESSION:
        return isinstance(value, dict)
    return isinstance(value, list)


class DocumentFile:
    """JSON file holding the whole document"""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def ensure(self) -> None:
        """Create the file with the default document if it is missing"""
        if not self.path.exists():
            self.save(default_document())

    def load(self) -> Dict[str, Any]:
        try:
            if self.path.exists():
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.error(f"Document at {self.path} is not a JSON object, using defaults")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading document: {e}")
        return default_document()

    def save(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Error saving document: {e}")

    def get(self, key: str) -> Any:
        data = self.load()
        if key not in data:
            raise KeyError(key)
        return data[key]

    def put(self, key: str, value: Any) -> None:
        data = self.load()
        data[key] = value
        self.save(data)

    def reset(self) -> Dict[str, Any]:
        data = default_document()
        self.save(data)
        return data
