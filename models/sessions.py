# models/sessions.py

from pydantic import BaseModel, Field

class RecallSession(BaseModel):
    trial_number: int = Field(ge=1)
    success: bool
    response_time: float = Field(0.0, ge=0)  # milliseconds
    sequence_length: int = Field(ge=1)
    grid_size: int = Field(3, ge=1)
    attempts: int = 1
    total_rounds: int = Field(1, ge=1)

    model_config = {"frozen": True}

class TimedRecallSession(RecallSession):
    completed_on_time: bool = True
    allowed_time: float = Field(0.0, ge=0)  # milliseconds

class StroopSession(BaseModel):
    trial_number: int = Field(ge=1)
    is_correct: bool
    response_time: float = Field(ge=0)
    is_congruent: bool
    word_shown: str
    ink_color: str
    selected_color: str

    model_config = {"frozen": True}

class SpellingSession(BaseModel):
    trial_number: int = Field(ge=1)
    is_correct: bool
    response_time: float = Field(ge=0)
    word: str = Field(min_length=1)
    user_spelling: str
    partial_credit: float = Field(ge=0, le=1)   # 0-1 based on how close the spelling was
    phoneme_accuracy: float = Field(ge=0, le=1)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "trial_number": 1,
                "is_correct": False,
                "response_time": 4200,
                "word": "cave",
                "user_spelling": "cav",
                "partial_credit": 0.75,
                "phoneme_accuracy": 0.75,
            }
        },
    }
