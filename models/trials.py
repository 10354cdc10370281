# models/trials.py

from pydantic import BaseModel
from typing import Any, Dict, Tuple

class RecallTrial(BaseModel):
    sequence: Tuple[int, ...]
    grid_size: int

    model_config = {"frozen": True}

    @property
    def total_cells(self) -> int:
        return self.grid_size * self.grid_size

    def public_view(self) -> Dict[str, Any]:
        # The order itself is only revealed through highlights.
        return {"grid_size": self.grid_size, "sequence_length": len(self.sequence)}

class StroopTrial(BaseModel):
    word: str
    ink_color: str
    is_congruent: bool

    model_config = {"frozen": True}

    def public_view(self) -> Dict[str, Any]:
        return {"word": self.word, "ink_color": self.ink_color}

class PhonicsTrial(BaseModel):
    word: str
    image: str
    description: str

    model_config = {"frozen": True}

    def public_view(self) -> Dict[str, Any]:
        return {"image": self.image, "description": self.description}
