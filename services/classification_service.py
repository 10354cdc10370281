# services/classification_service.py

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from config.settings import settings
from models.scores import GameScores
from services.scorers import round_half_up

logger = logging.getLogger(__name__)

INVALID_INPUT = "Please enter valid age and complete at least one game"
NO_ASSESSMENTS = "No assessments completed"

LEVEL_LABELS = {
    0: "Very Low",
    1: "Low",
    2: "Below Average",
    3: "Average",
    4: "Above Average",
}

ATTENTION_LABELS = {
    0: "Significant Concern",
    1: "Likely Concern",
    2: "Potential Concern",
    3: "Minimal Concern",
}

# skill -> (endpoint path, request field, display label)
SKILL_ENDPOINTS = {
    "working_memory": ("/predict/working-memory", "WorkingMemory_Score", "Working Memory"),
    "processing_speed": ("/predict/processing-speed", "ProcessingSpeed_Score", "Processing Speed"),
    "attention": ("/predict/attention", "Attention_Score", "Attention"),
    "auditory_processing": ("/predict/auditory-processing", "AuditoryProcessing_Score", "Auditory Processing"),
}

def map_prediction_to_string(prediction: Any) -> str:
    return LEVEL_LABELS.get(prediction, "Unknown")

def map_attention_prediction_to_string(prediction: Any) -> str:
    return ATTENTION_LABELS.get(prediction, "Unknown")

def scale_attention_score(score: float) -> int:
    # 0-100 in the game maps onto the model's inverted 35-0 range
    return int(round_half_up(35 - (score / 100) * 35))

class ClassificationClient:
    """Posts each non-zero sub-score to the remote prediction service."""

    def __init__(self, base_url: str = None, timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url or settings.CLASSIFIER_BASE_URL
        self.timeout = timeout if timeout is not None else settings.CLASSIFIER_TIMEOUT
        self.transport = transport

    async def _predict(self, client: httpx.AsyncClient, skill: str, age: float, score: float) -> Tuple[str, str]:
        path, field, _ = SKILL_ENDPOINTS[skill]
        value = scale_attention_score(score) if skill == "attention" else score
        try:
            response = await client.post(path, json={"Age": age, field: value})
            response.raise_for_status()
            predicted = response.json()["predicted"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("Classification for %s failed: %s", skill, e)
            return skill, "Error"

        if skill == "attention":
            return skill, map_attention_prediction_to_string(predicted)
        return skill, map_prediction_to_string(predicted)

    async def classify(self, age: Optional[float], scores: GameScores) -> Dict[str, Any]:
        values = scores.model_dump()
        if not age or age <= 0 or all(v <= 0 for v in values.values()):
            return {"ok": False, "error": INVALID_INPUT}

        skills: List[str] = [s for s in SKILL_ENDPOINTS if values[s] > 0]
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            outcomes = await asyncio.gather(
                *(self._predict(client, skill, age, values[skill]) for skill in skills)
            )

        results = dict(outcomes)
        summary = " | ".join(
            f"{SKILL_ENDPOINTS[skill][2]}: {results[skill]}" for skill in skills
        ) or NO_ASSESSMENTS
        logger.info("Classification for age %s: %s", age, summary)

        return {"ok": True, "results": results, "summary": summary}

def get_classifier() -> ClassificationClient:
    return ClassificationClient()
