# routes/assessment_routes.py

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from typing import Any, Dict

from models.api_models import AgeUpdate, AssessmentCreate, ResponseBody
from services.assessment import Assessment
from services.assessment_store import AssessmentStore, get_store, run_classification
from services.classification_service import ClassificationClient, get_classifier
from services.ledger_service import ScoreLedger, get_ledger

router = APIRouter(prefix="/assessments", tags=["Assessment"])

def _load(assessment_id: str, store: AssessmentStore) -> Assessment:
    assessment = store.get(assessment_id)
    if assessment is None:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return assessment

def _queue_classification(assessment: Assessment, background_tasks: BackgroundTasks,
                          classifier: ClassificationClient) -> None:
    if (
        assessment.ready_for_classification
        and assessment.classification is None
        and not assessment.classification_pending
    ):
        assessment.classification_pending = True
        background_tasks.add_task(run_classification, assessment, classifier)

@router.post("")
def create_assessment(body: AssessmentCreate,
                      store: AssessmentStore = Depends(get_store),
                      ledger: ScoreLedger = Depends(get_ledger)) -> Dict[str, Any]:
    assessment = store.create(
        body.age, ledger,
        speech_supported=body.speech_supported,
        voices_loaded=body.voices_loaded,
    )
    return {"ok": True, "assessment": assessment.snapshot()}

@router.get("/{assessment_id}")
def get_assessment(assessment_id: str, background_tasks: BackgroundTasks,
                   store: AssessmentStore = Depends(get_store),
                   classifier: ClassificationClient = Depends(get_classifier)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    _queue_classification(assessment, background_tasks, classifier)
    return {"ok": True, "assessment": assessment.snapshot()}

@router.delete("/{assessment_id}")
def delete_assessment(assessment_id: str,
                      store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    if not store.discard(assessment_id):
        raise HTTPException(status_code=404, detail="Assessment not found")
    return {"ok": True, "deleted": assessment_id}

@router.put("/{assessment_id}/age")
def update_age(assessment_id: str, body: AgeUpdate,
               store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    assessment.set_age(body.age)
    return {"ok": True, "assessment": assessment.snapshot()}

@router.post("/{assessment_id}/start")
def start_game(assessment_id: str,
               store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    if not assessment.start_game():
        reason = assessment.runner.blocked_reason if assessment.runner else "Assessment already completed"
        return {"ok": False, "error": reason, "assessment": assessment.snapshot()}
    return {"ok": True, "assessment": assessment.snapshot()}

@router.post("/{assessment_id}/respond")
def respond(assessment_id: str, body: ResponseBody,
            store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    if not assessment.respond(body.unit):
        return {"ok": False, "error": "Response not accepted", "assessment": assessment.snapshot()}
    return {"ok": True, "assessment": assessment.snapshot()}

@router.post("/{assessment_id}/speak")
def speak(assessment_id: str,
          store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    if not assessment.play_word():
        reason = assessment.runner.blocked_reason if assessment.runner else None
        return {"ok": False, "error": reason or "Nothing to play", "assessment": assessment.snapshot()}
    return {"ok": True, "assessment": assessment.snapshot()}

@router.post("/{assessment_id}/speech-ended")
def speech_ended(assessment_id: str,
                 store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    return {"ok": assessment.speech_ended(), "assessment": assessment.snapshot()}

@router.post("/{assessment_id}/reset")
def reset_assessment(assessment_id: str,
                     store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    assessment.reset()
    return {"ok": True, "assessment": assessment.snapshot()}

@router.post("/{assessment_id}/classify")
async def classify_assessment(assessment_id: str,
                              store: AssessmentStore = Depends(get_store),
                              classifier: ClassificationClient = Depends(get_classifier)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    await run_classification(assessment, classifier)
    return assessment.classification

@router.get("/{assessment_id}/classification")
def get_classification(assessment_id: str,
                       store: AssessmentStore = Depends(get_store)) -> Dict[str, Any]:
    assessment = _load(assessment_id, store)
    return {
        "ok": True,
        "pending": assessment.classification_pending,
        "classification": assessment.classification,
    }
