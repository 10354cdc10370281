# services/ledger_service.py

import json
import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from config.settings import settings
from models.scores import ScoreRecord

logger = logging.getLogger(__name__)

MAX_RECORDS = 10
_records_adapter = TypeAdapter(List[ScoreRecord])

class ScoreLedger:
    """
    Best scores across all game modes, highest first, capped at
    MAX_RECORDS. Backends only read and write the raw stored value.
    """

    def __init__(self, key: str = None):
        self.key = key or settings.LEDGER_KEY

    def _read(self) -> Optional[Any]:
        raise NotImplementedError

    def _write(self, records: List[ScoreRecord]) -> None:
        raise NotImplementedError

    def load(self) -> List[ScoreRecord]:
        raw = self._read()
        if raw is None:
            return []
        try:
            if isinstance(raw, (str, bytes)):
                return _records_adapter.validate_json(raw)
            return _records_adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning("Ignoring unreadable score ledger %r: %s", self.key, e)
            return []

    def save_score(self, score: float, mode: str, timestamp: int = None) -> List[ScoreRecord]:
        record = ScoreRecord(
            score=score,
            mode=mode,
            timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
        )
        # New record first so it wins ties in the stable sort
        records = sorted([record, *self.load()], key=lambda r: r.score, reverse=True)[:MAX_RECORDS]
        self._write(records)
        return records

    def mode_scores(self, mode: str, limit: int = 5) -> List[ScoreRecord]:
        return [r for r in self.load() if r.mode == mode][:limit]

    def best_score(self, mode: str) -> float:
        return max((r.score for r in self.load() if r.mode == mode), default=0)

    def clear(self) -> None:
        self._write([])

class InMemoryScoreLedger(ScoreLedger):
    """Keeps the serialized JSON text, the way browser storage holds it."""

    def __init__(self, key: str = None, raw: Optional[str] = None):
        super().__init__(key)
        self.raw = raw

    def _read(self) -> Optional[str]:
        return self.raw

    def _write(self, records: List[ScoreRecord]) -> None:
        self.raw = json.dumps([r.model_dump() for r in records])

class MongoScoreLedger(ScoreLedger):
    def __init__(self, collection, key: str = None):
        super().__init__(key)
        self.collection = collection

    def _read(self) -> Optional[Any]:
        doc = self.collection.find_one({"_id": self.key})
        if not doc:
            return None
        return doc.get("scores")

    def _write(self, records: List[ScoreRecord]) -> None:
        doc: Dict[str, Any] = {"_id": self.key, "scores": [r.model_dump() for r in records]}
        self.collection.replace_one({"_id": self.key}, doc, upsert=True)

_ledger: Optional[ScoreLedger] = None

def get_ledger() -> ScoreLedger:
    global _ledger
    if _ledger is None:
        if settings.LEDGER_BACKEND == "mongo":
            from services.db_service import get_db
            _ledger = MongoScoreLedger(get_db()["score_ledger"])
        else:
            _ledger = InMemoryScoreLedger()
    return _ledger
