# routes/ledger_routes.py

from fastapi import APIRouter, Depends
from typing import Any, Dict, Optional

from models.api_models import ScoreSubmission
from services.ledger_service import ScoreLedger, get_ledger

router = APIRouter(prefix="/scores", tags=["Score Ledger"])

@router.get("")
def list_scores(mode: Optional[str] = None,
                ledger: ScoreLedger = Depends(get_ledger)) -> Dict[str, Any]:
    if mode is None:
        return {"ok": True, "scores": [r.model_dump() for r in ledger.load()]}
    return {
        "ok": True,
        "mode": mode,
        "best_score": ledger.best_score(mode),
        "scores": [r.model_dump() for r in ledger.mode_scores(mode)],
    }

@router.post("")
def save_score(body: ScoreSubmission,
               ledger: ScoreLedger = Depends(get_ledger)) -> Dict[str, Any]:
    records = ledger.save_score(body.score, body.mode)
    return {"ok": True, "scores": [r.model_dump() for r in records]}
