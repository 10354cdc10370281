# services/assessment.py

import logging
import uuid
from typing import Any, Dict, Optional

from models.scores import SKILLS, GameScores
from services.games import build_game
from services.ledger_service import ScoreLedger
from services.scheduler import Scheduler
from services.speech import QueuedSpeechEngine, SpeechEngine
from services.stimulus import SnapshotSurface
from services.trial_runner import MAX_TRIALS, TrialRunner

logger = logging.getLogger(__name__)

# Fixed order of the assessment; each entry is (skill, game kind)
PHASES = (
    ("working_memory", "recall"),
    ("processing_speed", "timed_recall"),
    ("attention", "stroop"),
    ("auditory_processing", "phonics"),
)
COMPLETED = "completed"

class Assessment:
    """
    One pass through the four games for one child. Owns the scheduler, the
    active trial runner and the four sub-scores.
    """

    def __init__(
        self,
        age: Optional[float],
        *,
        scheduler: Optional[Scheduler] = None,
        speech: Optional[SpeechEngine] = None,
        ledger: Optional[ScoreLedger] = None,
        grid_size: int = 3,
        max_trials: int = MAX_TRIALS,
        rng=None,
    ):
        self.id = uuid.uuid4().hex
        self.age = age
        self.scheduler = scheduler or Scheduler()
        self.speech = speech if speech is not None else QueuedSpeechEngine()
        self.ledger = ledger
        self.grid_size = grid_size
        self.max_trials = max_trials
        self.rng = rng

        self.scores = GameScores()
        self.recorded = set()
        self.classification: Optional[Dict[str, Any]] = None
        self.classification_pending = False
        # Bumped on reset() and close(); results started before that are dropped
        self.generation = 0
        self.phase_index = 0
        self.surface = SnapshotSurface()
        self.runner: Optional[TrialRunner] = None
        self._load_phase()

    @property
    def phase(self) -> str:
        if self.phase_index >= len(PHASES):
            return COMPLETED
        return PHASES[self.phase_index][0]

    @property
    def ready_for_classification(self) -> bool:
        return bool(self.age and self.age > 0) and self.recorded.issuperset(SKILLS)

    def _load_phase(self) -> None:
        if self.runner is not None:
            self.runner.teardown()
        if self.phase == COMPLETED:
            self.runner = None
            return

        skill, kind = PHASES[self.phase_index]
        self.surface = SnapshotSurface()
        self.runner = TrialRunner(
            build_game(kind, grid_size=self.grid_size, rng=self.rng),
            self.scheduler,
            max_trials=self.max_trials,
            surface=self.surface,
            speech=self.speech,
            on_complete=self._on_game_complete,
        )

    def _on_game_complete(self, runner: TrialRunner, final_score: int) -> None:
        skill = runner.game.skill
        if skill in self.recorded:
            logger.warning("Ignoring second %s score in the same pass", skill)
            return

        setattr(self.scores, skill, final_score)
        self.recorded.add(skill)
        logger.info("Assessment %s recorded %s=%d", self.id, skill, final_score)

        self.phase_index += 1
        if self.phase == COMPLETED:
            logger.info("Assessment %s completed all games", self.id)

    def set_age(self, age: Optional[float]) -> None:
        self.age = age

    # -----------------------------
    # Driving the active game

    def start_game(self) -> bool:
        # A finished game hands over to the next phase's runner
        self._sync_runner()
        if self.runner is None:
            return False
        return self.runner.start_game(self.age)

    def _sync_runner(self) -> None:
        if self.phase == COMPLETED:
            if self.runner is not None:
                self.runner.teardown()
            self.runner = None
            return
        if self.runner is None or self.runner.game.skill != self.phase:
            self._load_phase()

    def respond(self, unit: Any) -> bool:
        if self.runner is None:
            return False
        return self.runner.respond(unit)

    def play_word(self) -> bool:
        if self.runner is None:
            return False
        return self.runner.play_stimulus()

    def speech_ended(self) -> bool:
        if isinstance(self.speech, QueuedSpeechEngine):
            return self.speech.finish()
        return False

    def reset(self) -> None:
        """Keep the current game's raw score in the ledger, then start over."""
        if self.runner is not None and self.ledger is not None and self.runner.correct_count > 0:
            self.ledger.save_score(self.runner.correct_count, self.runner.game.mode)

        if self.runner is not None:
            self.runner.reset()
        self._stop()

        self.scores = GameScores()
        self.recorded = set()
        self.classification = None
        self.classification_pending = False
        self.phase_index = 0
        self.runner = None
        self._load_phase()

    def close(self) -> None:
        """Stop every timer and utterance; nothing fires for this pass afterwards."""
        if self.runner is not None:
            self.runner.teardown()
        self._stop()

    def _stop(self) -> None:
        self.scheduler.cancel_all()
        self.speech.cancel()
        self.generation += 1

    def snapshot(self) -> Dict[str, Any]:
        runner = self.runner.snapshot() if self.runner is not None else None
        return {
            "id": self.id,
            "age": self.age,
            "phase": self.phase,
            "scores": self.scores.model_dump(),
            "game": runner,
            "frame": self.surface.frame() if self.runner is not None else None,
            "utterance": getattr(self.speech, "current", None),
            "classification": self.classification,
        }
