# routes/classification_routes.py

from fastapi import APIRouter, Depends
from typing import Any, Dict

from models.api_models import ClassificationRequest
from services.classification_service import ClassificationClient, get_classifier

router = APIRouter(prefix="/classification", tags=["Classification"])

@router.post("/predict")
async def predict(body: ClassificationRequest,
                  classifier: ClassificationClient = Depends(get_classifier)) -> Dict[str, Any]:
    """
    Classify up to four sub-scores for the given age.

    Skills scoring 0 are skipped; a failed call only marks its own skill as
    "Error".
    """
    return await classifier.classify(body.age, body.scores)
