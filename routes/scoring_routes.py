# routes/scoring_routes.py

from fastapi import APIRouter
from typing import Any, Dict

from models.api_models import (
    AttentionBody,
    AuditoryProcessingBody,
    ProcessingSpeedBody,
    SpellingCompareBody,
    WorkingMemoryBody,
)
from services.scorers import (
    AttentionScorer,
    AuditoryProcessingScorer,
    ProcessingSpeedScorer,
    ScorerBase,
    WorkingMemoryScorer,
)
from services.similarity import partial_credit, phoneme_accuracy, positional_accuracy

router = APIRouter(prefix="/scoring", tags=["Scoring"])

def _score(scorer: ScorerBase, sessions) -> Dict[str, Any]:
    for session in sessions:
        scorer.add_session(session)
    return {
        "ok": True,
        "score": scorer.calculate_score(),
        "analysis": scorer.get_detailed_analysis(),
    }

@router.post("/working-memory")
def score_working_memory(body: WorkingMemoryBody) -> Dict[str, Any]:
    return _score(WorkingMemoryScorer(body.max_trials), body.sessions)

@router.post("/processing-speed")
def score_processing_speed(body: ProcessingSpeedBody) -> Dict[str, Any]:
    scorer = ProcessingSpeedScorer(body.max_trials, timeout_penalty=body.timeout_penalty)
    return _score(scorer, body.sessions)

@router.post("/attention")
def score_attention(body: AttentionBody) -> Dict[str, Any]:
    return _score(AttentionScorer(body.max_trials), body.sessions)

@router.post("/auditory-processing")
def score_auditory_processing(body: AuditoryProcessingBody) -> Dict[str, Any]:
    """
    Score a list of spelling sessions.

    Partial credit is recomputed from each session's word and spelling, while
    the phoneme bonus uses the stored phoneme_accuracy as sent.
    """
    return _score(AuditoryProcessingScorer(body.max_trials), body.sessions)

@router.post("/phoneme-accuracy")
def compare_spelling(body: SpellingCompareBody) -> Dict[str, Any]:
    return {
        "ok": True,
        "phoneme_accuracy": phoneme_accuracy(body.correct, body.attempt),
        "positional_accuracy": positional_accuracy(body.correct, body.attempt),
        "partial_credit": partial_credit(body.correct, body.attempt),
    }
