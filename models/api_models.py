# models/api_models.py

from pydantic import BaseModel, Field
from typing import Any, List, Optional

from models.scores import GameScores
from models.sessions import RecallSession, SpellingSession, StroopSession, TimedRecallSession

class WorkingMemoryBody(BaseModel):
    max_trials: int = Field(15, ge=1)
    sessions: List[RecallSession]

class ProcessingSpeedBody(BaseModel):
    max_trials: int = Field(5, ge=1)
    timeout_penalty: float = 15
    sessions: List[TimedRecallSession]

class AttentionBody(BaseModel):
    max_trials: int = Field(5, ge=1)
    sessions: List[StroopSession]

class AuditoryProcessingBody(BaseModel):
    max_trials: int = Field(5, ge=1)
    sessions: List[SpellingSession]

class SpellingCompareBody(BaseModel):
    correct: str
    attempt: str

class AssessmentCreate(BaseModel):
    age: Optional[float] = None
    speech_supported: bool = True
    voices_loaded: bool = True

class AgeUpdate(BaseModel):
    age: Optional[float] = None

class ResponseBody(BaseModel):
    unit: Any   # clicked cell, selected colour or typed spelling

class ScoreSubmission(BaseModel):
    score: float = Field(ge=0)
    mode: str

class ClassificationRequest(BaseModel):
    age: Optional[float] = None
    scores: GameScores
