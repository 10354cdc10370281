# models/scores.py

from pydantic import BaseModel, Field

SKILLS = ("working_memory", "processing_speed", "attention", "auditory_processing")

class GameScores(BaseModel):
    working_memory: int = Field(0, ge=0, le=100)
    processing_speed: int = Field(0, ge=0, le=100)
    attention: int = Field(0, ge=0, le=100)
    auditory_processing: int = Field(0, ge=0, le=100)

class ScoreRecord(BaseModel):
    score: float
    mode: str          # e.g. '3x3', '4x4', 'timed-3x3', 'chameleon', 'phonics'
    timestamp: int     # epoch milliseconds
