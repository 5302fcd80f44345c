import json
import logging
import time
from datetime import datetime

from pydantic import TypeAdapter, ValidationError

from spinecheck.schemas.analysis import AnalysisResult, HistoryRecord
from spinecheck.storage import StoragePort

logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "analysis_history"

_records_adapter = TypeAdapter(list[HistoryRecord])


class HistoryStore:
    """Newest-first list of past analyses kept in on-device storage.

    Unbounded and never deduplicated; the only removal is ``clear()``.
    """

    def __init__(self, storage: StoragePort, clock=time.time):
        self._storage = storage
        self._clock = clock
        self.records: list[HistoryRecord] = []

    def _read(self) -> list[HistoryRecord]:
        raw = self._storage.get(HISTORY_STORAGE_KEY)
        if not raw:
            return []
        try:
            return _records_adapter.validate_json(raw)
        except ValidationError as e:
            # Corrupt history is treated as empty
            logger.warning("Ignoring unreadable history (%d chars): %s", len(raw), e.errors()[:1])
            return []

    def _write(self, records: list[HistoryRecord]) -> None:
        payload = [r.model_dump(mode="json", by_alias=True) for r in records]
        self._storage.set(HISTORY_STORAGE_KEY, json.dumps(payload, ensure_ascii=False))

    def load(self) -> list[HistoryRecord]:
        self.records = self._read()
        logger.info("Loaded %d history records", len(self.records))
        return self.records

    def append(self, result: AnalysisResult) -> HistoryRecord:
        now = self._clock()
        record = HistoryRecord(
            cobb_angle=result.cobb_angle,
            classification=result.classification,
            captured_at=datetime.fromtimestamp(now).strftime("%Y-%m-%d %H:%M"),
            timestamp=now * 1000,
        )
        records = [record, *self._read()]
        self._write(records)
        self.records = records
        return record

    def clear(self) -> None:
        self._storage.remove(HISTORY_STORAGE_KEY)
        self.records = []
        logger.info("History cleared")
