# services/assessment_store.py

import logging
from typing import Dict, Optional

from config.settings import settings
from services.assessment import Assessment
from services.classification_service import ClassificationClient
from services.ledger_service import ScoreLedger
from services.scheduler import Scheduler, monotonic_ms
from services.speech import QueuedSpeechEngine

logger = logging.getLogger(__name__)

class AssessmentStore:
    """In-process registry of running assessments, keyed by id."""

    def __init__(self, clock=monotonic_ms):
        self.clock = clock
        self._assessments: Dict[str, Assessment] = {}

    def create(self, age: Optional[float], ledger: ScoreLedger, *, speech_supported: bool = True,
               voices_loaded: bool = True, rng=None) -> Assessment:
        assessment = Assessment(
            age,
            scheduler=Scheduler(clock=self.clock),
            speech=QueuedSpeechEngine(speech_supported, voices_loaded),
            ledger=ledger,
            grid_size=settings.GRID_SIZE,
            max_trials=settings.MAX_TRIALS,
            rng=rng,
        )
        self._assessments[assessment.id] = assessment
        logger.info("Created assessment %s", assessment.id)
        return assessment

    def get(self, assessment_id: str) -> Optional[Assessment]:
        assessment = self._assessments.get(assessment_id)
        if assessment is not None:
            # Let timers that came due since the last request fire first
            assessment.scheduler.pump()
        return assessment

    def discard(self, assessment_id: str) -> bool:
        assessment = self._assessments.pop(assessment_id, None)
        if assessment is None:
            return False
        assessment.close()
        logger.info("Discarded assessment %s", assessment_id)
        return True

    def __len__(self) -> int:
        return len(self._assessments)

async def run_classification(assessment: Assessment, classifier: ClassificationClient) -> None:
    generation = assessment.generation
    assessment.classification_pending = True
    try:
        result = await classifier.classify(assessment.age, assessment.scores)
    finally:
        if assessment.generation == generation:
            assessment.classification_pending = False

    if assessment.generation != generation:
        logger.info("Dropping classification for assessment %s: reset while in flight", assessment.id)
        return
    assessment.classification = result

_store = AssessmentStore()

def get_store() -> AssessmentStore:
    return _store
