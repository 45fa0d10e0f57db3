"""
Per-video analysis history, bounded to the most recent entries
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Dict, List

from swingcoach.config.base import settings
from swingcoach.models.analysis import AnalysisHistoryEntry
from swingcoach.utils.logger import get_logger

logger = get_logger(__name__)


class HistoryStore(ABC):
    """Ordered (oldest first) list of history entries per video signature"""

    def __init__(self, max_entries: int = 3):
        self.max_entries = max_entries

    @abstractmethod
    async def get_list(self, signature: str) -> List[AnalysisHistoryEntry]:
        pass

    @abstractmethod
    async def put_list(self, signature: str, entries: List[AnalysisHistoryEntry]) -> None:
        pass

    async def append(self, signature: str, entry: AnalysisHistoryEntry) -> List[AnalysisHistoryEntry]:
        """Push an entry, dropping the oldest ones beyond max_entries"""
        entries = await self.get_list(signature)
        entries.append(entry)
        if len(entries) > self.max_entries:
            entries = entries[-self.max_entries:]
        await self.put_list(signature, entries)
        return entries


class MemoryHistoryStore(HistoryStore):
    """Process-local history, lost on restart"""

    def __init__(self, max_entries: int = 3):
        super().__init__(max_entries)
        self._data: Dict[str, List[AnalysisHistoryEntry]] = {}

    async def get_list(self, signature: str) -> List[AnalysisHistoryEntry]:
        return list(self._data.get(signature, []))

    async def put_list(self, signature: str, entries: List[AnalysisHistoryEntry]) -> None:
        self._data[signature] = list(entries)

    def clear(self):
        self._data.clear()


class FileHistoryStore(HistoryStore):
    """History persisted as a single JSON document on local disk"""

    def __init__(self, path: str, max_entries: int = 3):
        super().__init__(max_entries)
        self.path = path
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, list]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read history file {self.path}, starting empty: {e}")
            return {}

    def _save(self, data: Dict[str, list]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    async def get_list(self, signature: str) -> List[AnalysisHistoryEntry]:
        with self._lock:
            raw = self._load().get(signature, [])
        entries = []
        for item in raw:
            try:
                entries.append(AnalysisHistoryEntry.model_validate(item))
            except ValueError as e:
                logger.warning(f"Skipping malformed history entry for {signature}: {e}")
        return entries

    async def put_list(self, signature: str, entries: List[AnalysisHistoryEntry]) -> None:
        with self._lock:
            data = self._load()
            data[signature] = [e.model_dump(mode="json", by_alias=True) for e in entries]
            self._save(data)


def create_history_store() -> HistoryStore:
    if settings.HISTORY_FILE:
        logger.info(f"Using file history store at {settings.HISTORY_FILE}")
        return FileHistoryStore(settings.HISTORY_FILE, settings.HISTORY_MAX_ENTRIES)
    logger.info("Using in-memory history store")
    return MemoryHistoryStore(settings.HISTORY_MAX_ENTRIES)


history_store = create_history_store()
