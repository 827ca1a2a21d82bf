import logging
import threading
from pathlib import Path
from typing import List, Protocol
from pydantic import TypeAdapter
from websentinel.core.config import Settings
from websentinel.models.schemas import SecurityReport

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10

_REPORTS = TypeAdapter(List[SecurityReport])


class HistoryStore(Protocol):
    def load(self) -> List[SecurityReport]: ...
    def save(self, report: SecurityReport) -> List[SecurityReport]: ...
    def clear(self) -> None: ...


def merge_history(history: List[SecurityReport], report: SecurityReport,
                  limit: int = HISTORY_LIMIT) -> List[SecurityReport]:
    """Newest first, one entry per url."""
    return ([report] + [r for r in history if r.url != report.url])[:limit]


class InMemoryHistoryStore:
    def __init__(self, limit: int = HISTORY_LIMIT):
        self.limit = limit
        self._reports: List[SecurityReport] = []
        self._lock = threading.Lock()

    def load(self) -> List[SecurityReport]:
        with self._lock:
            return list(self._reports)

    def save(self, report: SecurityReport) -> List[SecurityReport]:
        with self._lock:
            self._reports = merge_history(self._reports, report, self.limit)
            return list(self._reports)

    def clear(self) -> None:
        with self._lock:
            self._reports = []


class JsonFileHistoryStore:
    """
    History kept as a JSON array of reports (camelCase keys, same shape the
    API returns). A missing or corrupt file reads as empty history.
    """

    def __init__(self, path, limit: int = HISTORY_LIMIT):
        self.path = Path(path)
        self.limit = limit
        self._lock = threading.Lock()

    def _read(self) -> List[SecurityReport]:
        if not self.path.exists():
            return []
        try:
            return _REPORTS.validate_json(self.path.read_bytes())
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, e)
            return []

    def load(self) -> List[SecurityReport]:
        with self._lock:
            return self._read()

    def save(self, report: SecurityReport) -> List[SecurityReport]:
        with self._lock:
            history = merge_history(self._read(), report, self.limit)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(_REPORTS.dump_json(history, by_alias=True))
            return history

    def clear(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)


def build_history_store(settings: Settings) -> HistoryStore:
    if settings.history_path:
        return JsonFileHistoryStore(settings.history_path, settings.history_limit)
    return InMemoryHistoryStore(settings.history_limit)
