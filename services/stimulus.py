# services/stimulus.py

from typing import Any, Dict, List, Optional

class StimulusSurface:
    """
    What the trial runner tells the presentation layer. The base class
    ignores every event so callers only override what they draw.
    """

    def present(self, trial) -> None:
        pass

    def highlight(self, cell: Optional[int]) -> None:
        pass

    def show_feedback(self, correct: bool, message: str) -> None:
        pass

    def on_score(self, live_score: int, correct_count: int) -> None:
        pass

    def on_timeout(self) -> None:
        pass

    def on_advance(self, trial_index: int) -> None:
        pass

    def on_complete(self, final_score: int) -> None:
        pass

class SnapshotSurface(StimulusSurface):
    """Keeps the latest frame so it can be served to a polling client."""

    def __init__(self):
        self.trial = None
        self.highlighted_cell: Optional[int] = None
        self.feedback: Optional[Dict[str, Any]] = None
        self.events: List[str] = []

    def present(self, trial) -> None:
        self.trial = trial
        self.highlighted_cell = None
        self.feedback = None
        self.events.append("present")

    def highlight(self, cell: Optional[int]) -> None:
        self.highlighted_cell = cell

    def show_feedback(self, correct: bool, message: str) -> None:
        self.feedback = {"type": "correct" if correct else "incorrect", "message": message}

    def on_timeout(self) -> None:
        self.events.append("timeout")

    def on_advance(self, trial_index: int) -> None:
        self.events.append(f"advance:{trial_index}")

    def on_complete(self, final_score: int) -> None:
        self.events.append(f"complete:{final_score}")

    def frame(self) -> Dict[str, Any]:
        return {
            "trial": self.trial.public_view() if self.trial is not None else None,
            "highlighted_cell": self.highlighted_cell,
            "feedback": self.feedback,
            "events": list(self.events),
        }
